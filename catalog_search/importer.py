"""Catalog loading from a JSON export or an Elasticsearch index.

Both sources share one document shape. Keys are accepted in camelCase or
snake_case since exports from the catalog store are not consistent::

    {"kind": "item", "id": "1001", "code": "NQS_F4GM", "ean": "5901234123457",
     "stockEligible": true, "lifecycle": "new", "categoryId": 3,
     "zones": ["bathroom"], "finishIds": [7], "promoted": false,
     "texts": {"en": {"name": "Modern Bathroom Sink", "tags": ["ceramic"]}}}
    {"kind": "category", "id": 3, "priority": 10}
    {"kind": "finish", "id": 7, "labels": {"en": "Chrome", "pl": "Chrom"}}

A JSON file holds the same documents grouped under ``items``, ``categories``
and ``finishes``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from elasticsearch import Elasticsearch

from .catalog import CatalogItem, CatalogRepository, CatalogSnapshot, Category, Finish, ItemText, Lifecycle
from .config import settings
from .es_client import get_client, scan_documents

logger = logging.getLogger(__name__)


@dataclass
class CatalogData:
    items: List[CatalogItem] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    finishes: List[Finish] = field(default_factory=list)


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _optional_float(value: Any) -> Optional[float]:
    return None if value in (None, "") else float(value)


def _prepare_text(raw: Mapping[str, Any], finish_labels: List[str]) -> ItemText:
    finishes = _pick(raw, "finishes", "finish_names", "finishNames")
    return ItemText(
        name=_pick(raw, "name", "title", default=""),
        secondary_name=_pick(raw, "secondaryName", "secondary_name", default=""),
        feature_1=_pick(raw, "feature1", "feature_1", default=""),
        feature_2=_pick(raw, "feature2", "feature_2", default=""),
        collection=_pick(raw, "collection", "collectionName", "collection_name", default=""),
        tags=tuple(_pick(raw, "tags", default=[])),
        finishes=tuple(finishes) if finishes is not None else tuple(finish_labels),
    )


def _prepare_item(raw: Mapping[str, Any], finishes: Mapping[int, Finish]) -> CatalogItem:
    finish_ids = frozenset(int(value) for value in _pick(raw, "finishIds", "finish_ids", default=[]))
    texts: Dict[str, ItemText] = {}
    for language, text in (_pick(raw, "texts", default={}) or {}).items():
        labels = [
            finishes[fid].labels[language]
            for fid in sorted(finish_ids)
            if fid in finishes and language in finishes[fid].labels
        ]
        texts[language] = _prepare_text(text, labels)
    category_id = _pick(raw, "categoryId", "category_id")
    return CatalogItem(
        id=str(_pick(raw, "id", "externalId", "external_id")),
        code=str(_pick(raw, "code", "productCode", "product_code", default="")),
        ean=str(_pick(raw, "ean", "globalCode", "global_code", default="")),
        stock_eligible=_flag(_pick(raw, "stockEligible", "stock_eligible", default=True)),
        data_eligible=_flag(_pick(raw, "dataEligible", "data_eligible", default=True)),
        price=_optional_float(_pick(raw, "price")),
        promo_price=_optional_float(_pick(raw, "promoPrice", "promo_price")),
        currency=_pick(raw, "currency", default=""),
        stock_quantity=int(_pick(raw, "stockQuantity", "stock_quantity", default=0)),
        lifecycle=Lifecycle.parse(_pick(raw, "lifecycle", "lifecycleStage", "lifecycle_stage")),
        category_id=int(category_id) if category_id is not None else None,
        zones=frozenset(_pick(raw, "zones", default=[])),
        finish_ids=finish_ids,
        promoted=_flag(_pick(raw, "promoted", "promotion", default=False)),
        image=_pick(raw, "image", "imageUrl", "image_url"),
        texts=texts,
    )


def _prepare_category(raw: Mapping[str, Any]) -> Category:
    return Category(id=int(raw["id"]), priority=int(_pick(raw, "priority", default=0)))


def _prepare_finish(raw: Mapping[str, Any]) -> Finish:
    return Finish(id=int(raw["id"]), labels=dict(_pick(raw, "labels", default={})))


def build_catalog(
    items: Iterable[Mapping[str, Any]],
    categories: Iterable[Mapping[str, Any]] = (),
    finishes: Iterable[Mapping[str, Any]] = (),
) -> CatalogData:
    finish_list = [_prepare_finish(raw) for raw in finishes]
    finish_map = {finish.id: finish for finish in finish_list}
    item_list = []
    for raw in items:
        if _pick(raw, "id", "externalId", "external_id") is None:
            logger.warning("Skipping catalog document without id: %r", raw)
            continue
        item_list.append(_prepare_item(raw, finish_map))
    return CatalogData(
        items=item_list,
        categories=[_prepare_category(raw) for raw in categories],
        finishes=finish_list,
    )


def load_catalog_file(path: Path) -> CatalogData:
    if not path.exists():
        raise FileNotFoundError(f"Catalog file missing: {path}")
    # Detect Git LFS placeholder to avoid attempting to parse it as JSON.
    with path.open("r", encoding="utf-8") as fh:
        first_line = fh.readline()
        if first_line.startswith("version https://git-lfs.github.com/spec/v1"):
            raise ValueError(f"Catalog file {path} is a Git LFS pointer; real data not downloaded")
        fh.seek(0)
        payload = json.load(fh)
    if not isinstance(payload, dict):
        raise ValueError(f"Catalog file {path} must hold a JSON object")
    return build_catalog(
        payload.get("items", []),
        payload.get("categories", []),
        payload.get("finishes", []),
    )


def load_catalog_index(es: Elasticsearch, index: str) -> CatalogData:
    grouped: Dict[str, List[Mapping[str, Any]]] = {"item": [], "category": [], "finish": []}
    for document in scan_documents(es, index):
        kind = document.get("kind", "item")
        if kind not in grouped:
            logger.warning("Ignoring catalog document of unknown kind %r", kind)
            continue
        grouped[kind].append(document)
    return build_catalog(grouped["item"], grouped["category"], grouped["finish"])


def load_catalog() -> CatalogData:
    if settings.catalog_source == "elasticsearch":
        return load_catalog_index(get_client(), settings.es_index)
    if settings.catalog_source == "file":
        return load_catalog_file(Path(settings.catalog_path))
    raise ValueError(f"Unknown catalog source: {settings.catalog_source!r}")


def reload_catalog(repository: CatalogRepository, data: CatalogData | None = None) -> CatalogSnapshot:
    """Load the catalog and publish it as the repository's next snapshot."""

    catalog = data if data is not None else load_catalog()
    logger.info(
        "Loaded catalog source=%s items=%s categories=%s finishes=%s",
        settings.catalog_source,
        len(catalog.items),
        len(catalog.categories),
        len(catalog.finishes),
    )
    return repository.publish(catalog.items, catalog.categories, catalog.finishes)
