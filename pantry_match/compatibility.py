import logging
from typing import Iterable, List, Sequence, Tuple

from .catalog import GlobalCatalogIndex, InventoryIndex
from .matcher import match, round_half_up
from .normalize import normalize
from .parser import parse_lines
from .schemas import (
    DEFAULT_POLICY,
    CompatibilityReport,
    MatchPolicy,
    MatchResult,
    ParsedIngredient,
)

logger = logging.getLogger(__name__)


def _countable(parsed: ParsedIngredient) -> bool:
    return not parsed.is_header and bool((parsed.name or "").strip())


def _shopping_list(missing: Iterable[MatchResult]) -> List[str]:
    seen = set()
    names: List[str] = []
    for result in missing:
        display = " ".join(result.recipe_ingredient.split())
        key = normalize(display) or display.lower()
        if key in seen:
            continue
        seen.add(key)
        names.append(display)
    return names


def aggregate(
    recipe_id,
    parsed_ingredients: Sequence[ParsedIngredient],
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> CompatibilityReport:
    """Fold per-ingredient matches for one recipe into a report.

    Section headers and blank lines are ignored. An ingredient is available
    when it matched anything and its confidence reaches
    ``policy.availability_threshold``; everything else is missing.
    """
    available: List[MatchResult] = []
    missing: List[MatchResult] = []

    for parsed in parsed_ingredients:
        if not _countable(parsed):
            continue
        result = match(parsed, inventory, global_catalog, policy)
        if result.is_available(policy):
            available.append(result)
        else:
            missing.append(result)

    total = len(available) + len(missing)
    compatibility = round_half_up(100 * len(available) / total) if total else 0
    confidence = (
        round_half_up(sum(r.confidence for r in available) / len(available))
        if available
        else 0
    )

    logger.debug(
        "Recipe %s: %d/%d available (score=%d, confidence=%d)",
        recipe_id, len(available), total, compatibility, confidence,
    )
    return CompatibilityReport(
        recipe_id=None if recipe_id is None else str(recipe_id),
        total_ingredients=total,
        available_ingredients=available,
        missing_ingredients=missing,
        compatibility_score=compatibility,
        confidence_score=confidence,
        shopping_list=_shopping_list(missing),
    )


def assess_recipe(
    recipe_id,
    lines: Iterable[str],
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> CompatibilityReport:
    return aggregate(recipe_id, parse_lines(lines), inventory, global_catalog, policy)


def analyze_recipes(
    recipes: Iterable[Tuple[object, Iterable[str]]],
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> List[CompatibilityReport]:
    """Assess many ``(recipe_id, lines)`` pairs, best compatibility first."""
    reports = [
        assess_recipe(recipe_id, lines, inventory, global_catalog, policy)
        for recipe_id, lines in recipes
    ]
    reports.sort(key=lambda r: r.compatibility_score, reverse=True)
    return reports


def export_shopping_list(report: CompatibilityReport) -> str:
    """Plain-text shopping list, one missing ingredient per line."""
    return "\n".join(report.shopping_list)


def read_shopping_list(text: str) -> List[str]:
    return [line for line in (text or "").split("\n") if line.strip()]
