"""Catalog data model and the versioned snapshot the query path reads.

The search engine never sees the catalog store directly. It reads a
:class:`CatalogSnapshot`: an immutable bundle of items, categories, finishes
and the weighted vectors derived from them. :class:`CatalogRepository` owns
the current snapshot and replaces it wholesale on every rebuild, so a query
holding a reference always sees one consistent version.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .errors import VectorMissing
from .vectors import WeightedVector, build_item_vectors

logger = logging.getLogger(__name__)


class Lifecycle(str, Enum):
    NEW = "new"
    NORMAL = "normal"
    OTHER = "other"

    @property
    def rank(self) -> int:
        return _LIFECYCLE_RANK[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "Lifecycle":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


_LIFECYCLE_RANK = {Lifecycle.NEW: 2, Lifecycle.NORMAL: 1, Lifecycle.OTHER: 0}


@dataclass(frozen=True)
class ItemText:
    name: str = ""
    secondary_name: str = ""
    feature_1: str = ""
    feature_2: str = ""
    collection: str = ""
    tags: Tuple[str, ...] = ()
    finishes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CatalogItem:
    id: str
    code: str = ""
    ean: str = ""
    stock_eligible: bool = True
    data_eligible: bool = True
    price: Optional[float] = None
    promo_price: Optional[float] = None
    currency: str = ""
    stock_quantity: int = 0
    lifecycle: Lifecycle = Lifecycle.NORMAL
    category_id: Optional[int] = None
    zones: FrozenSet[str] = frozenset()
    finish_ids: FrozenSet[int] = frozenset()
    promoted: bool = False
    image: Optional[str] = None
    texts: Mapping[str, ItemText] = field(default_factory=dict, compare=False)

    def text_for(self, language: str) -> ItemText:
        return self.texts.get(language) or ItemText()


@dataclass(frozen=True)
class Category:
    id: int
    priority: int = 0


@dataclass(frozen=True)
class Finish:
    id: int
    labels: Mapping[str, str] = field(default_factory=dict, compare=False)

    def label(self, language: str) -> str:
        if language in self.labels:
            return self.labels[language]
        return next(iter(self.labels.values()), str(self.id))


@dataclass(frozen=True)
class CatalogSnapshot:
    version: int
    items: Tuple[CatalogItem, ...] = ()
    categories: Mapping[int, Category] = field(default_factory=dict)
    finishes: Mapping[int, Finish] = field(default_factory=dict)
    vectors: Mapping[Tuple[str, str], WeightedVector] = field(default_factory=dict)
    built_at: float = 0.0
    build_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def cache_token(self) -> str:
        """Identity of this build, unique across processes sharing a cache."""
        return f"{self.version}:{self.build_id}"

    def vector_for(self, item_id: str, language: str) -> WeightedVector:
        try:
            return self.vectors[(item_id, language)]
        except KeyError:
            raise VectorMissing(item_id, language) from None

    def category_priority(self, item: CatalogItem) -> int:
        category = self.categories.get(item.category_id) if item.category_id is not None else None
        return category.priority if category else 0


def build_snapshot(
    items: Iterable[CatalogItem],
    categories: Iterable[Category] = (),
    finishes: Iterable[Finish] = (),
    version: int = 1,
) -> CatalogSnapshot:
    """Derive every weighted vector and freeze the result."""

    item_tuple = tuple(items)
    vectors: Dict[Tuple[str, str], WeightedVector] = {}
    for item in item_tuple:
        vectors.update(build_item_vectors(item))
    snapshot = CatalogSnapshot(
        version=version,
        items=item_tuple,
        categories=MappingProxyType({category.id: category for category in categories}),
        finishes=MappingProxyType({finish.id: finish for finish in finishes}),
        vectors=MappingProxyType(vectors),
        built_at=time.time(),
    )
    logger.info(
        "Built catalog snapshot version=%s items=%s vectors=%s",
        version,
        len(item_tuple),
        len(vectors),
    )
    return snapshot


class CatalogRepository:
    """Holds the published snapshot and swaps it atomically on rebuild.

    Readers call :meth:`current` once per query and never lock. Writers
    serialize on an internal lock, build a complete new snapshot and only then
    replace the reference.
    """

    def __init__(self, snapshot: CatalogSnapshot | None = None) -> None:
        self._snapshot = snapshot or CatalogSnapshot(version=0)
        self._lock = threading.Lock()

    def current(self) -> CatalogSnapshot:
        return self._snapshot

    def publish(
        self,
        items: Iterable[CatalogItem],
        categories: Iterable[Category] = (),
        finishes: Iterable[Finish] = (),
    ) -> CatalogSnapshot:
        with self._lock:
            snapshot = build_snapshot(items, categories, finishes, version=self._snapshot.version + 1)
            self._snapshot = snapshot
        return snapshot

    def refresh_items(self, items: Iterable[CatalogItem]) -> CatalogSnapshot:
        """Replace or add items, rebuilding only their vectors."""

        changed = {item.id: item for item in items}
        refreshed_ids = set(changed)
        with self._lock:
            base = self._snapshot
            merged = [changed.pop(item.id, item) for item in base.items]
            merged.extend(changed.values())
            vectors = {key: vector for key, vector in base.vectors.items() if key[0] not in refreshed_ids}
            for item in merged:
                if item.id in refreshed_ids:
                    vectors.update(build_item_vectors(item))
            snapshot = replace(
                base,
                version=base.version + 1,
                items=tuple(merged),
                vectors=MappingProxyType(vectors),
                built_at=time.time(),
                build_id=uuid.uuid4().hex,
            )
            self._snapshot = snapshot
        logger.info("Refreshed %s items, snapshot version=%s", len(refreshed_ids), snapshot.version)
        return snapshot

    def remove_items(self, item_ids: Iterable[str]) -> CatalogSnapshot:
        dropped = set(item_ids)
        with self._lock:
            base = self._snapshot
            snapshot = replace(
                base,
                version=base.version + 1,
                items=tuple(item for item in base.items if item.id not in dropped),
                vectors=MappingProxyType(
                    {key: vector for key, vector in base.vectors.items() if key[0] not in dropped}
                ),
                built_at=time.time(),
                build_id=uuid.uuid4().hex,
            )
            self._snapshot = snapshot
        return snapshot
