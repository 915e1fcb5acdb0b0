from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import MatchPolicy


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Storage
    database_url: str = "sqlite:///./pantry_match.db"

    # Server
    log_level: str = "INFO"
    cache_size: int = 512

    # Matching heuristics
    availability_threshold: int = 50
    partial_cutoff: float = 0.5
    global_confidence: int = 60

    model_config = SettingsConfigDict(
        env_prefix="PANTRY_MATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def match_policy(self) -> MatchPolicy:
        return MatchPolicy(
            availability_threshold=self.availability_threshold,
            partial_cutoff=self.partial_cutoff,
            global_confidence=self.global_confidence,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
