"""Match-tier classification.

Tiers are exclusive across the whole query: if any item is an exact code hit,
only exact hits are returned; otherwise if any item is a partial hit, only
partial hits are returned; otherwise every eligible item goes through fuzzy
scoring.
"""
from __future__ import annotations

from enum import IntEnum
from typing import FrozenSet, Iterable

from .catalog import CatalogItem
from .tokenizer import FulltextExpression, QueryTerms


class MatchTier(IntEnum):
    FUZZY = 0
    PARTIAL = 1
    EXACT = 2


def is_exact_code_match(item: CatalogItem, terms: QueryTerms) -> bool:
    ean = (item.ean or "").upper()
    code = (item.code or "").upper()
    if ean and ean in terms.raw_tokens:
        return True
    return bool(code) and code in terms.perfect_codes


def is_partial_code_match(item: CatalogItem, terms: QueryTerms) -> bool:
    code = (item.code or "").upper()
    if not code:
        return False
    return any(candidate in code for candidate in terms.perfect_codes)


def matches_fulltext(expression: FulltextExpression, words: FrozenSet[str]) -> bool:
    """OR semantics: one verbatim or prefix hit on any vector word suffices."""

    for term in expression.terms:
        if term.prefix:
            if any(word.startswith(term.text) for word in words):
                return True
        elif term.text in words:
            return True
    return False


def resolve_tier(item: CatalogItem, terms: QueryTerms, vector_words: FrozenSet[str]) -> MatchTier:
    if is_exact_code_match(item, terms):
        return MatchTier.EXACT
    if is_partial_code_match(item, terms) or matches_fulltext(terms.fulltext, vector_words):
        return MatchTier.PARTIAL
    return MatchTier.FUZZY


def select_tier(tiers: Iterable[MatchTier]) -> MatchTier:
    """The active tier is the best tier any candidate reached."""

    return max(tiers, default=MatchTier.FUZZY)


def passes_stock_policy(item: CatalogItem, tier: MatchTier) -> bool:
    """Exact code lookups bypass stock filtering; everything else needs stock."""

    return item.stock_eligible or tier is MatchTier.EXACT
