"""Ingredient matching and recipe compatibility against a kitchen pantry."""
from .catalog import GlobalCatalogIndex, InventoryIndex, build_global_index, build_index
from .compatibility import aggregate, analyze_recipes, assess_recipe, export_shopping_list
from .matcher import has_ingredient, match, match_line
from .normalize import normalize
from .parser import parse, parse_lines
from .schemas import (
    CompatibilityReport,
    IngredientSuggestion,
    MatchPolicy,
    MatchResult,
    MatchType,
    ParsedIngredient,
)
from .suggest import suggest_category, unknown_ingredients

__all__ = [
    "CompatibilityReport",
    "GlobalCatalogIndex",
    "IngredientSuggestion",
    "InventoryIndex",
    "MatchPolicy",
    "MatchResult",
    "MatchType",
    "ParsedIngredient",
    "aggregate",
    "analyze_recipes",
    "assess_recipe",
    "build_global_index",
    "build_index",
    "export_shopping_list",
    "has_ingredient",
    "match",
    "match_line",
    "normalize",
    "parse",
    "parse_lines",
    "suggest_category",
    "unknown_ingredients",
]
