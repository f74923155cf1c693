"""Shared catalog fixtures."""
from __future__ import annotations

import pytest

from catalog_search.catalog import CatalogItem, CatalogRepository, Category, Finish, ItemText, Lifecycle
from catalog_search.search_service import SearchEngine


def _item(item_id: str, **kwargs) -> CatalogItem:
    return CatalogItem(id=item_id, **kwargs)


@pytest.fixture
def catalog_items() -> list[CatalogItem]:
    return [
        _item(
            "1001",
            code="NQS_F4GM",
            ean="5901234123457",
            promoted=True,
            stock_quantity=12,
            lifecycle=Lifecycle.NEW,
            category_id=1,
            zones=frozenset({"bathroom"}),
            finish_ids=frozenset({7}),
            texts={
                "en": ItemText(name="Modern Bathroom Sink", secondary_name="Countertop basin", collection="Aqua"),
                "pl": ItemText(name="Nowoczesna umywalka łazienkowa", collection="Aqua"),
                "ru": ItemText(name="Современная раковина для ванной", collection="Aqua"),
            },
        ),
        _item(
            "1002",
            code="NQS_F4GB",
            stock_quantity=3,
            category_id=1,
            zones=frozenset({"bathroom"}),
            finish_ids=frozenset({8}),
            texts={"en": ItemText(name="Modern Bathroom Sink", secondary_name="Countertop basin", collection="Aqua")},
        ),
        _item(
            "2001",
            code="KTC_M120",
            stock_quantity=4,
            category_id=2,
            zones=frozenset({"kitchen"}),
            finish_ids=frozenset({7, 9}),
            texts={"en": ItemText(name="Kitchen mixer tap", collection="Vero")},
        ),
        _item(
            "2002",
            code="KTC_M121",
            stock_eligible=False,
            lifecycle=Lifecycle.OTHER,
            category_id=2,
            zones=frozenset({"kitchen"}),
            texts={"en": ItemText(name="Kitchen mixer tap", collection="Vero")},
        ),
        _item(
            "3001",
            code="SHW_R300",
            stock_quantity=5,
            lifecycle=Lifecycle.NEW,
            category_id=3,
            zones=frozenset({"bathroom", "spa"}),
            finish_ids=frozenset({7, 8, 9}),
            texts={"en": ItemText(name="Rain shower set", secondary_name="Thermostatic", collection="Nimbus")},
        ),
        _item(
            "4001",
            code="HID_0001",
            data_eligible=False,
            texts={"en": ItemText(name="Modern Bathroom Sink")},
        ),
    ]


@pytest.fixture
def categories() -> list[Category]:
    return [Category(1, priority=10), Category(2, priority=5), Category(3, priority=1)]


@pytest.fixture
def finishes() -> list[Finish]:
    return [
        Finish(7, labels={"en": "Chrome", "pl": "Chrom"}),
        Finish(8, labels={"en": "Matte black", "pl": "Czarny mat"}),
        Finish(9, labels={"pl": "Złoto szczotkowane"}),
    ]


@pytest.fixture
def repository(catalog_items, categories, finishes) -> CatalogRepository:
    repo = CatalogRepository()
    repo.publish(catalog_items, categories, finishes)
    return repo


@pytest.fixture
def engine(repository) -> SearchEngine:
    return SearchEngine(
        repository,
        threshold=0.35,
        weight_bonus=0.01,
        empty_query_policy="match_all",
        language_fallback=None,
        max_page_size=100,
        timeout_ms=None,
    )
