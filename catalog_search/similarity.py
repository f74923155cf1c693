"""Fuzzy similarity between query terms and an item's weighted vector.

Two figures are produced per item:

``avg_similarity``
    For every query term, the best weighted score against any vector term,
    averaged over the query terms.

``avg_similarity_without_worst``
    Query terms are paired one-to-one with vector terms (greedy, best pair
    first; a vector term consumed by one query term is not reused), then the
    single weakest pair is dropped before averaging. An item that matches all
    but one outlier word still scores well here.

A pair's score is ``similarity(a, b) * (1 + weight_bonus * weight)``, so hits
in high-priority fields (the core name) beat equal hits in tags or finishes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence, Set, Tuple

from .vectors import WeightedVector

logger = logging.getLogger(__name__)

SimilarityFn = Callable[[str, str], float]

DEFAULT_WEIGHT_BONUS = 0.01


@dataclass(frozen=True)
class SimilarityScores:
    avg_similarity: float = 0.0
    avg_similarity_without_worst: float = 0.0


ZERO_SCORES = SimilarityScores()


def _trigrams(word: str) -> Set[str]:
    padded = f"  {word.lower()} "
    return {padded[idx : idx + 3] for idx in range(len(padded) - 2)}


def trigram_similarity(left: str, right: str) -> float:
    """Jaccard overlap of padded character trigrams, in ``[0, 1]``."""

    if not left or not right:
        return 0.0
    left_grams = _trigrams(left)
    right_grams = _trigrams(right)
    union = left_grams | right_grams
    if not union:
        return 0.0
    return len(left_grams & right_grams) / len(union)


def score_matrix(
    query_terms: Sequence[str],
    vector: WeightedVector,
    similarity: SimilarityFn = trigram_similarity,
    weight_bonus: float = DEFAULT_WEIGHT_BONUS,
) -> List[List[float]]:
    return [
        [similarity(query_term, term) * (1 + weight_bonus * weight) for term, weight in vector.terms]
        for query_term in query_terms
    ]


def best_per_term(matrix: Sequence[Sequence[float]]) -> List[float]:
    return [max(row, default=0.0) for row in matrix]


def greedy_assignment(matrix: Sequence[Sequence[float]]) -> List[float]:
    """Pair query terms with vector terms, best pair first, each used once.

    Returns one score per query term, in query order. Query terms left over
    once the vector terms run out score 0.
    """

    pairs: List[Tuple[float, int, int]] = [
        (score, row_idx, col_idx)
        for row_idx, row in enumerate(matrix)
        for col_idx, score in enumerate(row)
    ]
    pairs.sort(key=lambda pair: (-pair[0], pair[1], pair[2]))
    assigned = [0.0] * len(matrix)
    used_rows: Set[int] = set()
    used_cols: Set[int] = set()
    for score, row_idx, col_idx in pairs:
        if row_idx in used_rows or col_idx in used_cols:
            continue
        assigned[row_idx] = score
        used_rows.add(row_idx)
        used_cols.add(col_idx)
        if len(used_rows) == len(matrix):
            break
    return assigned


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def mean_without_worst(values: Sequence[float]) -> float:
    """Mean after dropping the single lowest value; unchanged for one value."""

    if len(values) < 2:
        return mean(values)
    trimmed = sorted(values)[1:]
    return mean(trimmed)


def score_item(
    similarity_terms: str,
    vector: WeightedVector | None,
    similarity: SimilarityFn = trigram_similarity,
    weight_bonus: float = DEFAULT_WEIGHT_BONUS,
) -> SimilarityScores:
    query_terms = similarity_terms.split()
    if not query_terms or not vector:
        return ZERO_SCORES
    try:
        matrix = score_matrix(query_terms, vector, similarity, weight_bonus)
    except Exception as exc:
        logger.warning("similarity failed terms=%r: %s", similarity_terms, exc)
        return ZERO_SCORES
    return SimilarityScores(
        avg_similarity=mean(best_per_term(matrix)),
        avg_similarity_without_worst=mean_without_worst(greedy_assignment(matrix)),
    )


def qualifies_for_fuzzy(scores: SimilarityScores, threshold: float) -> bool:
    return scores.avg_similarity > threshold or scores.avg_similarity_without_worst > threshold
