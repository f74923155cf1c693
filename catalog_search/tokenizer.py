"""Query tokenization and compound-code expansion."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .normalizer import split_tokens

NON_WORD_RE = re.compile(r"\W+")
# Tokens longer than this lose their last character for typo tolerance.
TRUNCATE_ABOVE = 3
CODE_JOINER = "_"


@dataclass(frozen=True)
class FulltextTerm:
    text: str
    prefix: bool = False

    def render(self) -> str:
        return f"{self.text}*" if self.prefix else self.text


@dataclass(frozen=True)
class FulltextExpression:
    """OR-joined set of verbatim and prefix terms."""

    terms: Tuple[FulltextTerm, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.terms)

    def render(self) -> str:
        return " | ".join(term.render() for term in self.terms)


@dataclass(frozen=True)
class QueryTerms:
    raw_tokens: Tuple[str, ...]
    tokens: Tuple[str, ...]
    perfect_codes: Tuple[str, ...]
    code_patterns: Tuple[str, ...]
    fulltext: FulltextExpression = field(default_factory=FulltextExpression)
    similarity_terms: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def perfect_code_candidates(tokens: Sequence[str]) -> List[str]:
    """Single tokens interleaved with adjacent pairs: ``A, A_B, B, B_C, C``."""

    candidates: List[str] = []
    for idx, token in enumerate(tokens):
        candidates.append(token)
        if idx + 1 < len(tokens):
            candidates.append(f"{token}{CODE_JOINER}{tokens[idx + 1]}")
    return candidates


def code_patterns(candidates: Sequence[str]) -> List[str]:
    return [f"%{candidate}%" for candidate in candidates]


def _truncate(token: str) -> str:
    return token[:-1] if len(token) > TRUNCATE_ABOVE else token


def fulltext_expression(tokens: Sequence[str]) -> FulltextExpression:
    terms: List[FulltextTerm] = []
    for token in tokens:
        cleaned = NON_WORD_RE.sub("", token)
        if not cleaned:
            continue
        if len(cleaned) > TRUNCATE_ABOVE:
            terms.append(FulltextTerm(cleaned[:-1], prefix=True))
        else:
            terms.append(FulltextTerm(cleaned))
    return FulltextExpression(tuple(terms))


def similarity_terms(tokens: Sequence[str]) -> str:
    return " ".join(_truncate(token) for token in tokens if token)


def expand_query(raw_query: str, normalized_query: str) -> QueryTerms:
    """Derive every matching artifact from a normalized query.

    ``raw_query`` is only used for global-code (EAN) equality, which compares
    against what the user typed rather than the connector-trimmed form.
    """

    raw_tokens = tuple(token.upper() for token in split_tokens(raw_query))
    tokens = tuple(token.upper() for token in split_tokens(normalized_query))
    candidates = perfect_code_candidates(tokens)
    return QueryTerms(
        raw_tokens=raw_tokens,
        tokens=tokens,
        perfect_codes=tuple(candidates),
        code_patterns=tuple(code_patterns(candidates)),
        fulltext=fulltext_expression(tokens),
        similarity_terms=similarity_terms(tokens),
    )
