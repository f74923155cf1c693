"""End-to-end tests for the search engine over an in-memory snapshot."""

import logging
from unittest import mock

import pytest

from catalog_search.cache import InMemoryCache
from catalog_search.catalog import CatalogItem, CatalogRepository, ItemText
from catalog_search.errors import EmptyQuery, InvalidPagination, SearchTimeout, UnsupportedLanguage
from catalog_search.search_service import SearchEngine, SearchQuery, SearchService, page_to_payload
from catalog_search.tiers import MatchTier


def ids(page):
    return [result.item.id for result in page.results]


def test_connector_trimmed_query_is_partial_match(engine):
    page = engine.search(SearchQuery("bathroom sink for modern", "en"))

    assert page.normalized == "BATHROOM SINK MODERN"
    assert page.tier is MatchTier.PARTIAL
    assert ids(page) == ["1001", "1002"]
    assert all(result.tier is MatchTier.PARTIAL for result in page.results)


def test_exact_code_match_excludes_lower_tiers(engine):
    page = engine.search(SearchQuery("NQS_F4GM sink", "en"))

    assert page.tier is MatchTier.EXACT
    assert ids(page) == ["1001"]


def test_global_code_lookup_is_exact(engine):
    page = engine.search(SearchQuery("5901234123457", "en"))

    assert page.tier is MatchTier.EXACT
    assert ids(page) == ["1001"]


def test_promoted_exact_match_sorts_first(engine):
    page = engine.search(SearchQuery("NQS_F4GB NQS_F4GM", "en"))

    assert page.tier is MatchTier.EXACT
    assert ids(page) == ["1001", "1002"]
    first, second = page.results
    assert first.scores == second.scores
    assert first.item.promoted and not second.item.promoted


def test_exact_code_bypasses_stock_filter(engine):
    page = engine.search(SearchQuery("KTC_M121", "en"))

    assert ids(page) == ["2002"]
    assert not page.results[0].item.stock_eligible


def test_out_of_stock_items_drop_from_partial_matches(engine):
    page = engine.search(SearchQuery("kitchen mixer tap", "en"))

    assert page.tier is MatchTier.PARTIAL
    assert ids(page) == ["2001"]


def test_data_ineligible_items_never_returned(engine):
    page = engine.search(SearchQuery("HID_0001", "en"))

    assert "4001" not in ids(page)


def test_typo_falls_through_to_fuzzy(engine):
    page = engine.search(SearchQuery("kittchen", "en"))

    assert page.tier is MatchTier.FUZZY
    assert ids(page) == ["2001"]
    assert page.results[0].scores.avg_similarity > 0.35


def test_fuzzy_threshold_excludes_weak_matches(repository):
    strict = SearchEngine(repository, threshold=0.6, language_fallback=None, timeout_ms=None)

    page = strict.search(SearchQuery("kittchen", "en"))

    assert page.tier is MatchTier.FUZZY
    assert page.total == 0
    assert page.pages == 0
    assert page.results == []


def test_cyrillic_query_matches_cyrillic_vector(engine, caplog):
    with caplog.at_level(logging.WARNING, logger="catalog_search.search_service"):
        page = engine.search(SearchQuery("раковина для ванной", "ru"))

    assert page.normalized == "РАКОВИНА ВАННОЙ"
    assert page.tier is MatchTier.PARTIAL
    assert ids(page) == ["1001"]
    assert "item excluded" in caplog.text


def test_polish_diacritics_are_folded(engine):
    page = engine.search(SearchQuery("umywalka łazienkowa", "pl"))

    assert page.normalized == "UMYWALKA LAZIENKOWA"
    assert ids(page) == ["1001"]


def test_empty_query_lists_catalog_by_default(engine):
    page = engine.search(SearchQuery("  ", "en"))

    assert page.tier is MatchTier.FUZZY
    assert ids(page) == ["1001", "1002", "2001", "3001"]
    assert page.zones == ["bathroom", "kitchen", "spa"]
    assert [(facet.id, facet.label) for facet in page.finishes] == [
        (7, "Chrome"),
        (8, "Matte black"),
        (9, "Złoto szczotkowane"),
    ]


def test_empty_query_rejected_when_configured(repository):
    strict = SearchEngine(repository, empty_query_policy="reject", language_fallback=None, timeout_ms=None)

    with pytest.raises(EmptyQuery):
        strict.search(SearchQuery(" , ", "en"))


def test_unknown_empty_query_policy_is_refused(repository):
    with pytest.raises(ValueError):
        SearchEngine(repository, empty_query_policy="maybe")


def test_zone_and_finish_filters_keep_facets_of_whole_pool(engine):
    page = engine.search(SearchQuery("", "en", zones=("spa",)))

    assert ids(page) == ["3001"]
    assert page.total == 1
    assert page.zones == ["bathroom", "kitchen", "spa"]

    page = engine.search(SearchQuery("", "en", finishes=(9,)))
    assert ids(page) == ["2001", "3001"]


@pytest.mark.parametrize("page_number, limit", [(0, 10), (-1, 10), (1, 0), (1, 101)])
def test_invalid_pagination(engine, page_number, limit):
    with pytest.raises(InvalidPagination):
        engine.search(SearchQuery("sink", "en", page=page_number, limit=limit))


def test_unsupported_language(engine, repository):
    with pytest.raises(UnsupportedLanguage):
        engine.search(SearchQuery("sink", "xx"))

    lenient = SearchEngine(repository, language_fallback="en", timeout_ms=None)
    assert lenient.search(SearchQuery("sink", "xx")).language == "en"


def test_pages_reproduce_unpaginated_ordering():
    repo = CatalogRepository()
    repo.publish(
        [
            CatalogItem(id=f"{idx:03d}", category_id=None, texts={"en": ItemText(name=f"Basin model {idx}")})
            for idx in range(23)
        ]
    )
    engine = SearchEngine(repo, language_fallback=None, timeout_ms=None)

    full = ids(engine.search(SearchQuery("basin", "en", limit=100)))
    paged = []
    for page_number in range(1, 6):
        page = engine.search(SearchQuery("basin", "en", page=page_number, limit=5))
        assert page.total == 23
        assert page.pages == 5
        paged.extend(ids(page))

    assert len(full) == 23
    assert paged == full


def test_deadline_aborts_search():
    repo = CatalogRepository()
    repo.publish([CatalogItem(id=str(idx), texts={"en": ItemText(name="Basin")}) for idx in range(500)])
    engine = SearchEngine(repo, language_fallback=None, timeout_ms=None)

    with pytest.raises(SearchTimeout):
        engine.search(SearchQuery("basin", "en"), deadline_ms=0.000001)


def test_query_keeps_snapshot_it_started_with(repository, engine):
    held = repository.current()

    repository.publish([CatalogItem(id="9", texts={"en": ItemText(name="Mirror")})])

    assert [item.id for item in held.items][:2] == ["1001", "1002"]
    page = engine.search(SearchQuery("mirror", "en"))
    assert ids(page) == ["9"]
    assert page.snapshot_version == held.version + 1


def test_payload_shape(engine):
    payload = page_to_payload(engine.search(SearchQuery("NQS_F4GM", "en")))

    assert payload["tier"] == "exact"
    assert payload["total"] == 1
    item = payload["results"][0]
    assert item["id"] == "1001"
    assert item["code"] == "NQS_F4GM"
    assert item["name"] == "Modern Bathroom Sink"
    assert item["promoted"] is True
    assert item["inStock"] is True
    assert payload["finishes"] == [{"id": 7, "label": "Chrome"}]


def test_service_caches_pages_per_snapshot(engine, repository):
    service = SearchService(engine, InMemoryCache(), cache_ttl_seconds=60)
    query = SearchQuery("bathroom sink", "en")

    with mock.patch.object(engine, "search", wraps=engine.search) as spy:
        first = service.search_products(query)
        second = service.search_products(query)
        assert spy.call_count == 1
        assert first == second

        repository.refresh_items([CatalogItem(id="1002", code="NQS_F4GB", stock_eligible=False)])
        third = service.search_products(query)
        assert spy.call_count == 2

    assert [item["id"] for item in third["results"]] == ["1001"]


def test_service_without_cache_always_searches(engine):
    service = SearchService(engine, cache=None)

    with mock.patch.object(engine, "search", wraps=engine.search) as spy:
        service.search_products(SearchQuery("sink", "en"))
        service.search_products(SearchQuery("sink", "en"))

    assert spy.call_count == 2


def test_shared_cache_never_crosses_catalogs_at_same_version():
    shared = InMemoryCache()
    old_repo, new_repo = CatalogRepository(), CatalogRepository()
    old_repo.publish([CatalogItem(id="old", texts={"en": ItemText(name="Basin")})])
    new_repo.publish([CatalogItem(id="new", texts={"en": ItemText(name="Basin")})])
    assert old_repo.current().version == new_repo.current().version
    old_service = SearchService(SearchEngine(old_repo, language_fallback=None, timeout_ms=None), shared, 60)
    new_service = SearchService(SearchEngine(new_repo, language_fallback=None, timeout_ms=None), shared, 60)
    query = SearchQuery("basin", "en")

    assert [item["id"] for item in old_service.search_products(query)["results"]] == ["old"]
    assert [item["id"] for item in new_service.search_products(query)["results"]] == ["new"]


def test_failing_similarity_scores_zero_instead_of_failing(repository, caplog):
    def broken(left: str, right: str) -> float:
        raise ZeroDivisionError("division by zero")

    engine = SearchEngine(repository, similarity=broken, language_fallback=None, timeout_ms=None)

    with caplog.at_level(logging.WARNING, logger="catalog_search.similarity"):
        page = engine.search(SearchQuery("zzzz", "en"))

    assert page.tier is MatchTier.FUZZY
    assert page.results == []
    assert "similarity failed" in caplog.text
