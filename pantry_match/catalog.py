"""Lookup structures over a personal inventory or the global catalog.

Both are built from ``{category: [ingredient names]}`` and are immutable
snapshots: rebuild them whenever the source data changes and compare
``fingerprint`` values to tell versions apart.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from .normalize import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexEntry:
    key: str
    name: str
    category: str
    words: FrozenSet[str]
    position: int
    # every category the normalized name was listed under, first one first
    categories: Tuple[str, ...] = ()


def fingerprint(items_by_category: Mapping[str, Iterable[str]]) -> str:
    """Stable version hash of an inventory mapping (order sensitive)."""
    payload = list(_snapshot(items_by_category).items())
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class InventoryIndex:
    """The user's own ingredients, keyed by normalized name."""

    source = "personal"

    def __init__(
        self,
        entries: Dict[str, IndexEntry],
        categories: Dict[str, FrozenSet[str]],
        version: str,
    ):
        self._entries = entries
        self._categories = MappingProxyType(categories)
        self._version = version

        by_word: Dict[str, List[IndexEntry]] = {}
        for entry in entries.values():
            for word in entry.words:
                by_word.setdefault(word, []).append(entry)
        self._by_word = {w: tuple(es) for w, es in by_word.items()}

    @property
    def fingerprint(self) -> str:
        return self._version

    @property
    def categories(self) -> Mapping[str, FrozenSet[str]]:
        return self._categories

    def lookup(self, key: str) -> Optional[IndexEntry]:
        return self._entries.get(key)

    def candidates(self, words: Iterable[str]) -> List[IndexEntry]:
        """Entries sharing at least one word with ``words``, in insertion order."""
        seen: Dict[int, IndexEntry] = {}
        for word in words:
            for entry in self._by_word.get(word, ()):
                seen.setdefault(entry.position, entry)
        return [seen[p] for p in sorted(seen)]

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} entries={len(self)} version={self._version[:12]}>"


class GlobalCatalogIndex(InventoryIndex):
    """Shared ingredient names; recognises an ingredient without claiming the user has it."""

    source = "global"


def _snapshot(items_by_category: Mapping[str, Iterable[str]]) -> Dict[str, List[str]]:
    return {
        str(category): [str(n) for n in (names or []) if n is not None]
        for category, names in (items_by_category or {}).items()
    }


def _build(cls, items_by_category: Mapping[str, Iterable[str]]):
    snapshot = _snapshot(items_by_category)
    firsts: Dict[str, Tuple[str, str]] = {}
    seen_in: Dict[str, List[str]] = {}
    categories: Dict[str, set] = {}

    for category, names in snapshot.items():
        bucket = categories.setdefault(category, set())
        for raw in names:
            name = raw.strip()
            if not name:
                continue
            bucket.add(name)
            key = normalize(name)
            if not key:
                continue
            # collisions keep the first-seen name, but remember the category
            firsts.setdefault(key, (name, category))
            listed = seen_in.setdefault(key, [])
            if category not in listed:
                listed.append(category)

    entries: Dict[str, IndexEntry] = {}
    for position, (key, (name, category)) in enumerate(firsts.items()):
        entries[key] = IndexEntry(
            key=key,
            name=name,
            category=category,
            words=frozenset(key.split()),
            position=position,
            categories=tuple(seen_in[key]),
        )

    index = cls(
        entries,
        {c: frozenset(ns) for c, ns in categories.items()},
        fingerprint(snapshot),
    )
    logger.debug("Built %r from %d categories", index, len(categories))
    return index


def build_index(inventory_by_category: Mapping[str, Iterable[str]]) -> InventoryIndex:
    return _build(InventoryIndex, inventory_by_category)


def build_global_index(catalog_by_category: Mapping[str, Iterable[str]]) -> GlobalCatalogIndex:
    return _build(GlobalCatalogIndex, catalog_by_category)
