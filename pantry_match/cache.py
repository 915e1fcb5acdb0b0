"""Host-side caches for indices and compatibility reports.

Indices are keyed by the content fingerprint of the inventory they were
built from, so a changed pantry or catalog always yields a fresh index.
Reports are keyed by ``(inventory_version, catalog_version, recipe_id)``;
recipe edits must call ``invalidate_recipe``.
"""
import logging
import threading
from collections import OrderedDict
from typing import Callable, Hashable, Iterable, Mapping, Optional, Tuple, TypeVar

from .catalog import (
    GlobalCatalogIndex,
    InventoryIndex,
    build_global_index,
    build_index,
    fingerprint,
)
from .schemas import CompatibilityReport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _LRU:
    def __init__(self, maxsize: int):
        self.maxsize = max(1, maxsize)
        self._data: "OrderedDict[Hashable, object]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable):
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def put(self, key: Hashable, value) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def discard_where(self, predicate: Callable[[Hashable], bool]) -> int:
        with self._lock:
            doomed = [k for k in self._data if predicate(k)]
            for k in doomed:
                del self._data[k]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


class IndexCache:
    """Reuse built indices while the underlying inventory is unchanged."""

    def __init__(self, maxsize: int = 8):
        self._personal = _LRU(maxsize)
        self._global = _LRU(maxsize)

    def _get_or_build(self, lru: _LRU, items: Mapping[str, Iterable[str]], builder: Callable[..., T]) -> T:
        items = {c: list(ns or ()) for c, ns in (items or {}).items()}
        version = fingerprint(items)
        index = lru.get(version)
        if index is None:
            index = builder(items)
            lru.put(version, index)
            logger.info("Rebuilt %r", index)
        return index

    def inventory(self, items: Mapping[str, Iterable[str]]) -> InventoryIndex:
        return self._get_or_build(self._personal, items, build_index)

    def catalog(self, items: Mapping[str, Iterable[str]]) -> GlobalCatalogIndex:
        return self._get_or_build(self._global, items, build_global_index)

    def clear(self) -> None:
        self._personal.clear()
        self._global.clear()


ReportKey = Tuple[str, str, str]


class CompatibilityCache:
    """Reports keyed by (inventory version, catalog version, recipe id)."""

    def __init__(self, maxsize: int = 512):
        self._lru = _LRU(maxsize)

    @staticmethod
    def key(inventory: InventoryIndex, catalog: GlobalCatalogIndex, recipe_id) -> ReportKey:
        return inventory.fingerprint, catalog.fingerprint, str(recipe_id)

    def get(self, key: ReportKey) -> Optional[CompatibilityReport]:
        return self._lru.get(key)

    def get_or_compute(self, key: ReportKey, compute: Callable[[], CompatibilityReport]) -> CompatibilityReport:
        report = self._lru.get(key)
        if report is None:
            report = compute()
            self._lru.put(key, report)
        return report

    def invalidate_recipe(self, recipe_id) -> int:
        rid = str(recipe_id)
        dropped = self._lru.discard_where(lambda k: k[2] == rid)
        if dropped:
            logger.debug("Dropped %d cached report(s) for recipe %s", dropped, rid)
        return dropped

    def clear(self) -> None:
        self._lru.clear()

    def __len__(self) -> int:
        return len(self._lru)

