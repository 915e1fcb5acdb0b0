from pantry_match.cache import CompatibilityCache, IndexCache
from pantry_match.catalog import build_global_index
from pantry_match.compatibility import assess_recipe


def test_index_cache_reuses_until_inventory_changes():
    cache = IndexCache()
    first = cache.inventory({"produce": ["tomato"]})
    assert cache.inventory({"produce": ["tomato"]}) is first

    changed = cache.inventory({"produce": ["tomato", "onion"]})
    assert changed is not first
    assert "onion" in changed


def test_index_cache_accepts_generators():
    cache = IndexCache()
    index = cache.catalog({"spices": (n for n in ["saffron", "paprika"])})
    assert len(index) == 2
    assert index.source == "global"


def test_report_cache_keys_and_invalidation():
    indices = IndexCache()
    reports = CompatibilityCache()
    inventory = indices.inventory({"produce": ["tomato"]})
    catalog = build_global_index({})

    calls = []

    def compute():
        calls.append(1)
        return assess_recipe(1, ["tomato", "flour"], inventory, catalog)

    key = CompatibilityCache.key(inventory, catalog, 1)
    assert key == (inventory.fingerprint, catalog.fingerprint, "1")

    report = reports.get_or_compute(key, compute)
    assert reports.get_or_compute(key, compute) is report
    assert len(calls) == 1

    other = CompatibilityCache.key(inventory, catalog, 2)
    reports.get_or_compute(other, lambda: assess_recipe(2, [], inventory, catalog))
    assert len(reports) == 2

    assert reports.invalidate_recipe(1) == 1
    assert reports.get(key) is None
    assert len(reports) == 1
