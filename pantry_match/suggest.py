"""Category suggestions for ingredients nobody has catalogued yet."""
import logging
from typing import Iterable, List

from .catalog import GlobalCatalogIndex, InventoryIndex
from .matcher import match
from .normalize import normalize
from .parser import parse_lines
from .schemas import DEFAULT_POLICY, IngredientSuggestion, MatchPolicy, MatchType

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "pantry_staples"

# First hit wins, so "pepper" lands in produce before spices
CATEGORY_KEYWORDS = (
    ("proteins", ("meat", "chicken", "beef", "fish", "pork", "lamb")),
    ("fresh_produce", ("vegetable", "onion", "carrot", "tomato", "pepper", "cucumber")),
    ("flavor_builders", ("spice", "herb", "salt", "pepper", "cumin", "paprika")),
    ("dairy", ("milk", "cheese", "yogurt", "butter", "cream")),
    ("fresh_produce", ("fruit", "apple", "banana", "berry", "orange", "lemon")),
    ("cooking_essentials", ("oil", "vinegar")),
    ("bakery_grains", ("flour", "rice", "pasta", "bread")),
)

SUGGESTION_CONFIDENCE = 70


def suggest_category(name: str) -> str:
    """Best-guess catalog category for an ingredient name."""
    key = normalize(name)
    for category, keywords in CATEGORY_KEYWORDS:
        if any(word in key for word in keywords):
            return category
    return DEFAULT_CATEGORY


def unknown_ingredients(
    lines: Iterable[str],
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> List[IngredientSuggestion]:
    """Recipe ingredients matched nowhere, each with a suggested category.

    Names that normalize to nothing cannot be catalogued and are skipped;
    repeats of the same normalized name are reported once.
    """
    seen = set()
    suggestions: List[IngredientSuggestion] = []
    for parsed in parse_lines(lines):
        if parsed.is_header or not parsed.name.strip():
            continue
        result = match(parsed, inventory, global_catalog, policy)
        if result.match_type is not MatchType.NONE:
            continue
        key = normalize(parsed.name)
        if not key or key in seen:
            continue
        seen.add(key)
        suggestions.append(
            IngredientSuggestion(
                ingredient=result.recipe_ingredient,
                normalized_name=key,
                suggested_category=suggest_category(key),
                confidence=SUGGESTION_CONFIDENCE,
            )
        )
    logger.debug("%d unknown ingredient(s) found", len(suggestions))
    return suggestions
