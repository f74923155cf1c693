"""Filtering, ordering, facets and pagination of tier-selected candidates."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Collection, Dict, List, Sequence, Tuple

from .catalog import CatalogItem, CatalogSnapshot
from .similarity import ZERO_SCORES, SimilarityScores
from .tiers import MatchTier


@dataclass(frozen=True)
class RankedResult:
    item: CatalogItem
    tier: MatchTier
    scores: SimilarityScores = ZERO_SCORES
    category_priority: int = 0

    @property
    def lifecycle_rank(self) -> int:
        return self.item.lifecycle.rank

    def sort_key(self) -> Tuple:
        # Every business key sorts descending; item id ascending keeps pages stable.
        return (
            -int(self.item.promoted),
            -self.scores.avg_similarity,
            -self.scores.avg_similarity_without_worst,
            -self.category_priority,
            -self.lifecycle_rank,
            self.item.id,
        )


@dataclass(frozen=True)
class FinishFacet:
    id: int
    label: str


def filter_by_zones(results: Sequence[RankedResult], zones: Collection[str]) -> List[RankedResult]:
    if not zones:
        return list(results)
    wanted = set(zones)
    return [result for result in results if result.item.zones & wanted]


def filter_by_finishes(results: Sequence[RankedResult], finish_ids: Collection[int]) -> List[RankedResult]:
    if not finish_ids:
        return list(results)
    wanted = set(finish_ids)
    return [result for result in results if result.item.finish_ids & wanted]


def order_results(results: Sequence[RankedResult]) -> List[RankedResult]:
    return sorted(results, key=RankedResult.sort_key)


def paginate(results: Sequence[RankedResult], page: int, limit: int) -> List[RankedResult]:
    start = (page - 1) * limit
    return list(results[start : start + limit])


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def zone_facets(results: Sequence[RankedResult]) -> List[str]:
    zones = set()
    for result in results:
        zones.update(result.item.zones)
    return sorted(zones)


def finish_facets(
    results: Sequence[RankedResult],
    snapshot: CatalogSnapshot,
    language: str,
) -> List[FinishFacet]:
    facets: Dict[int, FinishFacet] = {}
    for result in results:
        for finish_id in result.item.finish_ids:
            if finish_id in facets:
                continue
            finish = snapshot.finishes.get(finish_id)
            label = finish.label(language) if finish else str(finish_id)
            facets[finish_id] = FinishFacet(id=finish_id, label=label)
    return sorted(facets.values(), key=lambda facet: (facet.label.lower(), facet.id))
