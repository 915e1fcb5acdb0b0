"""Tiered classification of one recipe ingredient against the indices.

Tiers are tried in order and the first hit wins:

1. exact    normalized name present in the personal inventory (100)
2. partial  word overlap ratio >= policy.partial_cutoff (70-90)
3. fuzzy    some word overlap below the cutoff (1-34)
4. global   no inventory overlap at all, but the global catalog knows it
5. none     nothing anywhere (0)

The overlap ratio is ``|words(ingredient) & words(candidate)| /
|words(ingredient)|``. Candidates are ranked by ratio, then by the shorter
normalized name, then by index insertion order.
"""
import logging
import math
from typing import Optional, Tuple

from .catalog import GlobalCatalogIndex, IndexEntry, InventoryIndex
from .normalize import normalize
from .parser import parse
from .schemas import DEFAULT_POLICY, MatchPolicy, MatchResult, MatchType, ParsedIngredient

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def best_overlap(key: str, index: InventoryIndex) -> Tuple[Optional[IndexEntry], float]:
    words = frozenset(key.split())
    if not words:
        return None, 0.0

    best: Optional[IndexEntry] = None
    best_rank = None
    for entry in index.candidates(words):
        shared = len(words & entry.words)
        rank = (-shared, len(entry.key), entry.position)
        if best_rank is None or rank < best_rank:
            best, best_rank = entry, rank

    if best is None:
        return None, 0.0
    return best, -best_rank[0] / len(words)


def _result(name: str, match_type: MatchType, confidence: int, entry: Optional[IndexEntry] = None) -> MatchResult:
    return MatchResult(
        recipe_ingredient=name,
        match_type=match_type,
        confidence=max(0, min(100, confidence)),
        matched_name=entry.name if entry else None,
        matched_category=entry.category if entry else None,
        matched_categories=entry.categories if entry else (),
    )


def _classify(
    name: str,
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy,
) -> MatchResult:
    key = normalize(name)
    if not key:
        return _result(name, MatchType.NONE, 0)

    entry = inventory.lookup(key)
    if entry is not None:
        return _result(name, MatchType.EXACT, 100, entry)

    entry, ratio = best_overlap(key, inventory)
    if entry is not None:
        if ratio >= policy.partial_cutoff:
            return _result(name, MatchType.PARTIAL, round_half_up(50 + ratio * 40), entry)
        return _result(name, MatchType.FUZZY, max(1, round_half_up(ratio * 70)), entry)

    entry = global_catalog.lookup(key)
    if entry is None:
        entry, _ = best_overlap(key, global_catalog)
    if entry is not None:
        return _result(name, MatchType.GLOBAL, policy.global_confidence, entry)

    return _result(name, MatchType.NONE, 0)


def match(
    parsed: ParsedIngredient,
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> MatchResult:
    """Classify ``parsed.name`` against the inventory, then the global catalog.

    Never raises: anything unexpected is logged and reported as a ``none``
    match, since claiming an ingredient is available when it is not is the
    worse mistake.
    """
    name = (parsed.name or "").strip()
    try:
        result = _classify(name, inventory, global_catalog, policy)
    except Exception:  # noqa: BLE001
        logger.exception("Matching failed for %r; treating as missing", name)
        return MatchResult(recipe_ingredient=name)
    logger.debug("%r -> %s (%d)", name, result.match_type.value, result.confidence)
    return result


def match_line(
    line: str,
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> MatchResult:
    return match(parse(line), inventory, global_catalog, policy)


def has_ingredient(
    name: str,
    inventory: InventoryIndex,
    global_catalog: GlobalCatalogIndex,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> bool:
    """True if ``name`` would count as available in a compatibility report."""
    return match_line(name, inventory, global_catalog, policy).is_available(policy)
