from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ----------------------------
# Engine values
# ----------------------------

class MatchType(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    FUZZY = "fuzzy"
    GLOBAL = "global"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Preference order, 0 is best."""
        return _MATCH_PREFERENCE.index(self)


_MATCH_PREFERENCE = (
    MatchType.EXACT,
    MatchType.PARTIAL,
    MatchType.FUZZY,
    MatchType.GLOBAL,
    MatchType.NONE,
)


class MatchPolicy(BaseModel):
    """Heuristic constants of the matcher. Tunable, see ``settings``."""

    model_config = ConfigDict(frozen=True)

    availability_threshold: int = Field(50, ge=0, le=100)
    partial_cutoff: float = Field(0.5, gt=0.0, le=1.0)
    global_confidence: int = Field(60, ge=0, le=100)


DEFAULT_POLICY = MatchPolicy()


class ParsedIngredient(BaseModel):
    model_config = ConfigDict(frozen=True)

    original: str = ""
    name: str = ""
    amount: Optional[str] = None
    unit: Optional[str] = None
    prep: Optional[str] = None
    is_header: bool = False


class MatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipe_ingredient: str
    match_type: MatchType = MatchType.NONE
    confidence: int = Field(0, ge=0, le=100)
    matched_name: Optional[str] = None
    matched_category: Optional[str] = None
    matched_categories: Tuple[str, ...] = ()

    def is_available(self, policy: MatchPolicy = DEFAULT_POLICY) -> bool:
        return (
            self.match_type is not MatchType.NONE
            and self.confidence >= policy.availability_threshold
        )


class CompatibilityReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipe_id: Optional[str] = None
    total_ingredients: int = 0
    available_ingredients: List[MatchResult] = Field(default_factory=list)
    missing_ingredients: List[MatchResult] = Field(default_factory=list)
    compatibility_score: int = Field(0, ge=0, le=100)
    confidence_score: int = Field(0, ge=0, le=100)
    shopping_list: List[str] = Field(default_factory=list)


# ----------------------------
# API payloads
# ----------------------------

class RecipeBase(BaseModel):
    name: str = Field(
        ..., min_length=1, json_schema_extra={"example": "Simple Pancakes"}
    )
    ingredients: List[str] = Field(
        default_factory=list,
        json_schema_extra={"example": ["---Batter---", "2 cups flour, sifted", "1 egg"]},
    )
    steps: List[str] = Field(
        default_factory=list,
        json_schema_extra={
            "example": [
                "Mix dry ingredients",
                "Add wet ingredients",
                "Cook on skillet until golden",
            ]
        },
    )


class RecipeCreate(RecipeBase):
    pass


class Recipe(RecipeBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class RecipePage(BaseModel):
    items: List[Recipe]
    total: int
    page: int
    page_size: int


class GroceryItemCreate(BaseModel):
    category: str = Field(..., min_length=1, json_schema_extra={"example": "fresh_produce"})
    name: str = Field(..., min_length=1, json_schema_extra={"example": "tomatoes"})


class GroceryItem(GroceryItemCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class GlobalIngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, json_schema_extra={"example": "saffron threads"})
    # suggested from the name when left out
    category: Optional[str] = Field(None, min_length=1)


class GlobalIngredient(GlobalIngredientCreate):
    id: int
    normalized_name: str
    usage_count: int

    model_config = ConfigDict(from_attributes=True)


class IngredientSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredient: str
    normalized_name: str
    suggested_category: str
    confidence: int = Field(70, ge=0, le=100)


class IngredientLines(BaseModel):
    lines: List[str] = Field(..., json_schema_extra={"example": ["1 1/2 cups rice (rinsed)"]})


class ParsedLines(BaseModel):
    parsed: List[ParsedIngredient]


class MatchResponse(BaseModel):
    inventory_version: str
    catalog_version: str
    results: List[MatchResult]
