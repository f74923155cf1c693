"""Search logic built on top of the in-process catalog snapshot."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .cache import CacheBackend, cache_key, get_cache
from .catalog import CatalogItem, CatalogRepository, CatalogSnapshot
from .config import settings
from .errors import EmptyQuery, InvalidPagination, SearchTimeout, VectorMissing
from .languages import resolve_language
from .normalizer import normalize_query
from .ranking import (
    FinishFacet,
    RankedResult,
    filter_by_finishes,
    filter_by_zones,
    finish_facets,
    order_results,
    page_count,
    paginate,
    zone_facets,
)
from .similarity import (
    ZERO_SCORES,
    SimilarityFn,
    qualifies_for_fuzzy,
    score_item,
    trigram_similarity,
)
from .tiers import MatchTier, passes_stock_policy, resolve_tier, select_tier
from .tokenizer import QueryTerms, expand_query
from .vectors import WeightedVector

logger = logging.getLogger(__name__)

EMPTY_QUERY_MATCH_ALL = "match_all"
EMPTY_QUERY_REJECT = "reject"

Candidate = Tuple[CatalogItem, WeightedVector]


@dataclass(frozen=True)
class SearchQuery:
    text: str
    language: str
    page: int = 1
    limit: int = 24
    zones: Tuple[str, ...] = ()
    finishes: Tuple[int, ...] = ()

    def cache_fields(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchPage:
    query: str
    normalized: str
    language: str
    tier: MatchTier
    results: List[RankedResult]
    total: int
    pages: int
    page: int
    limit: int
    zones: List[str] = field(default_factory=list)
    finishes: List[FinishFacet] = field(default_factory=list)
    took_ms: float = 0.0
    snapshot_version: int = 0
    snapshot_token: str = ""


class Deadline:
    """Cooperative deadline checked inside the candidate loops."""

    def __init__(self, budget_ms: Optional[float]) -> None:
        self.budget_ms = budget_ms
        self._expires_at = perf_counter() + budget_ms / 1000 if budget_ms else None

    def check(self) -> None:
        if self._expires_at is not None and perf_counter() > self._expires_at:
            raise SearchTimeout(self.budget_ms or 0)


class SearchEngine:
    """Evaluates one query against the repository's current snapshot."""

    def __init__(
        self,
        repository: CatalogRepository,
        *,
        similarity: SimilarityFn = trigram_similarity,
        threshold: float = settings.similarity_threshold,
        weight_bonus: float = settings.weight_bonus,
        empty_query_policy: str = settings.empty_query_policy,
        language_fallback: Optional[str] = settings.language_fallback or None,
        max_page_size: int = settings.max_page_size,
        timeout_ms: Optional[float] = settings.query_timeout_ms or None,
    ) -> None:
        if empty_query_policy not in {EMPTY_QUERY_MATCH_ALL, EMPTY_QUERY_REJECT}:
            raise ValueError(f"Unknown empty query policy: {empty_query_policy!r}")
        self.repository = repository
        self.similarity = similarity
        self.threshold = threshold
        self.weight_bonus = weight_bonus
        self.empty_query_policy = empty_query_policy
        self.language_fallback = language_fallback
        self.max_page_size = max_page_size
        self.timeout_ms = timeout_ms

    def _check_pagination(self, page: int, limit: int) -> None:
        if page <= 0:
            raise InvalidPagination(page, limit, "page must be >= 1")
        if limit <= 0:
            raise InvalidPagination(page, limit, "limit must be >= 1")
        if limit > self.max_page_size:
            raise InvalidPagination(page, limit, f"limit must be <= {self.max_page_size}")

    def _lookup_vector(self, snapshot: CatalogSnapshot, item: CatalogItem, language: str) -> Optional[WeightedVector]:
        try:
            return snapshot.vector_for(item.id, language)
        except VectorMissing as exc:
            logger.warning("%s; item excluded", exc)
            return None

    def _classify(
        self,
        snapshot: CatalogSnapshot,
        terms: QueryTerms,
        language: str,
        deadline: Deadline,
    ) -> Tuple[MatchTier, List[Candidate]]:
        buckets: Dict[MatchTier, List[Candidate]] = {tier: [] for tier in MatchTier}
        for item in snapshot.items:
            deadline.check()
            if not item.data_eligible:
                continue
            vector = self._lookup_vector(snapshot, item, language)
            if vector is None:
                continue
            tier = resolve_tier(item, terms, vector.words)
            if not passes_stock_policy(item, tier):
                continue
            buckets[tier].append((item, vector))
        active = select_tier(tier for tier, candidates in buckets.items() if candidates)
        return active, buckets[active]

    def _match_all(self, snapshot: CatalogSnapshot, language: str, deadline: Deadline) -> List[Candidate]:
        candidates: List[Candidate] = []
        for item in snapshot.items:
            deadline.check()
            if not (item.data_eligible and item.stock_eligible):
                continue
            vector = self._lookup_vector(snapshot, item, language)
            if vector is not None:
                candidates.append((item, vector))
        return candidates

    def _rank(
        self,
        snapshot: CatalogSnapshot,
        tier: MatchTier,
        candidates: Sequence[Candidate],
        terms: QueryTerms,
        deadline: Deadline,
    ) -> List[RankedResult]:
        ranked: List[RankedResult] = []
        for item, vector in candidates:
            deadline.check()
            if terms.is_empty:
                scores = ZERO_SCORES
            else:
                scores = score_item(terms.similarity_terms, vector, self.similarity, self.weight_bonus)
            if tier is MatchTier.FUZZY and not terms.is_empty and not qualifies_for_fuzzy(scores, self.threshold):
                continue
            ranked.append(
                RankedResult(
                    item=item,
                    tier=tier,
                    scores=scores,
                    category_priority=snapshot.category_priority(item),
                )
            )
        return ranked

    def search(self, query: SearchQuery, deadline_ms: Optional[float] = None) -> SearchPage:
        t0 = perf_counter()
        language = resolve_language(query.language, self.language_fallback)
        self._check_pagination(query.page, query.limit)
        deadline = Deadline(deadline_ms if deadline_ms is not None else self.timeout_ms)
        snapshot = self.repository.current()

        normalized = normalize_query(query.text, language)
        terms = expand_query(query.text, normalized)
        t1 = perf_counter()

        if terms.is_empty:
            if self.empty_query_policy == EMPTY_QUERY_REJECT:
                raise EmptyQuery(query.text)
            tier = MatchTier.FUZZY
            candidates = self._match_all(snapshot, language, deadline)
        else:
            tier, candidates = self._classify(snapshot, terms, language, deadline)
        t2 = perf_counter()

        ranked = self._rank(snapshot, tier, candidates, terms, deadline)
        t3 = perf_counter()

        zones = zone_facets(ranked)
        finishes = finish_facets(ranked, snapshot, language)
        filtered = filter_by_finishes(filter_by_zones(ranked, query.zones), query.finishes)
        ordered = order_results(filtered)
        results = paginate(ordered, query.page, query.limit)
        t4 = perf_counter()

        total_ms = (t4 - t0) * 1000
        logger.info(
            "timing: total=%.2fms normalize=%.2fms tier=%.2fms score=%.2fms rank=%.2fms q=%r normalized=%r lang=%s tier=%s hits=%s version=%s",
            total_ms,
            (t1 - t0) * 1000,
            (t2 - t1) * 1000,
            (t3 - t2) * 1000,
            (t4 - t3) * 1000,
            query.text,
            normalized,
            language,
            tier.name,
            len(ordered),
            snapshot.version,
        )
        return SearchPage(
            query=query.text,
            normalized=normalized,
            language=language,
            tier=tier,
            results=results,
            total=len(ordered),
            pages=page_count(len(ordered), query.limit),
            page=query.page,
            limit=query.limit,
            zones=zones,
            finishes=finishes,
            took_ms=total_ms,
            snapshot_version=snapshot.version,
            snapshot_token=snapshot.cache_token,
        )


def _serialize_result(result: RankedResult, language: str) -> Dict[str, Any]:
    item = result.item
    text = item.text_for(language)
    return {
        "id": item.id,
        "ean": item.ean or None,
        "code": item.code or None,
        "name": text.name or None,
        "secondaryName": text.secondary_name or None,
        "feature1": text.feature_1 or None,
        "feature2": text.feature_2 or None,
        "collection": text.collection or None,
        "price": item.price,
        "promoPrice": item.promo_price,
        "currency": item.currency or None,
        "promoted": item.promoted,
        "inStock": item.stock_eligible and item.stock_quantity > 0,
        "stockQuantity": item.stock_quantity,
        "image": item.image,
        "tier": result.tier.name.lower(),
        "avgSimilarity": round(result.scores.avg_similarity, 4),
        "avgSimilarityWithoutWorst": round(result.scores.avg_similarity_without_worst, 4),
    }


def page_to_payload(page: SearchPage) -> Dict[str, Any]:
    return {
        "query": page.query,
        "normalized": page.normalized,
        "language": page.language,
        "tier": page.tier.name.lower(),
        "results": [_serialize_result(result, page.language) for result in page.results],
        "total": page.total,
        "pages": page.pages,
        "page": page.page,
        "limit": page.limit,
        "zones": page.zones,
        "finishes": [{"id": facet.id, "label": facet.label} for facet in page.finishes],
        "took_ms": page.took_ms,
        "snapshot_version": page.snapshot_version,
    }


class SearchService:
    """Engine plus result-page cache, the entry point for API and CLI."""

    def __init__(
        self,
        engine: SearchEngine,
        cache: Optional[CacheBackend] = None,
        cache_ttl_seconds: int = settings.cache_ttl_seconds,
    ) -> None:
        self.engine = engine
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds

    @property
    def repository(self) -> CatalogRepository:
        return self.engine.repository

    def search_products(self, query: SearchQuery, deadline_ms: Optional[float] = None) -> Dict[str, Any]:
        request = query.cache_fields()
        if self.cache is not None:
            cache_start = perf_counter()
            cached = self.cache.get(cache_key(request, self.repository.current().cache_token))
            if cached is not None:
                logger.info(
                    "timing: total=%.2fms cache_hit=1 q=%r lang=%s",
                    (perf_counter() - cache_start) * 1000,
                    query.text,
                    query.language,
                )
                return cached

        page = self.engine.search(query, deadline_ms=deadline_ms)
        payload = page_to_payload(page)
        if self.cache is not None:
            self.cache.set(cache_key(request, page.snapshot_token), payload, self.cache_ttl_seconds)
            logger.debug("cache_store q=%r ttl=%s", query.text, self.cache_ttl_seconds)
        return payload


@lru_cache(maxsize=1)
def get_search_service() -> SearchService:
    """Process-wide service over an initially empty repository."""

    engine = SearchEngine(CatalogRepository())
    cache = get_cache() if settings.cache_enabled else None
    return SearchService(engine, cache)
