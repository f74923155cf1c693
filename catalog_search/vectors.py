"""Weighted term vectors built from an item's localized fields.

Each item gets one vector per language. Fields are walked in priority order
and every token gets a weight that starts at the field's base weight and
drops by one per token, never below 1::

    name "Modern Bathroom Sink"   -> 13:MODERN 12:BATHROOM 11:SINK
    collection "Aqua"             -> 3:AQUA
    tags ("ceramic", "wall hung") -> 2:CERAMIC 2:WALL 1:HUNG

The serialized form (``"<weight>:<TERM>"`` joined by spaces) is what the
catalog store keeps as a derived blob; queries only ever read it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Tuple

from .normalizer import normalize_text, split_tokens

if TYPE_CHECKING:
    from .catalog import CatalogItem, ItemText

FIELD_WEIGHTS: Tuple[Tuple[str, int], ...] = (
    ("name", 13),
    ("secondary_name", 8),
    ("feature_1", 5),
    ("feature_2", 5),
    ("collection", 3),
)
TAG_WEIGHT = 2
FINISH_WEIGHT = 1
MIN_WEIGHT = 1

_EDGE_PUNCT_RE = re.compile(r"^\W+|\W+$")
_WORD_RE = re.compile(r"\w+")


@dataclass(frozen=True)
class WeightedVector:
    terms: Tuple[Tuple[str, int], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.terms)

    def __len__(self) -> int:
        return len(self.terms)

    def serialize(self) -> str:
        return " ".join(f"{weight}:{term}" for term, weight in self.terms)

    def plain_text(self) -> str:
        """Terms without weights, so numeric weights never match a query."""
        return " ".join(term for term, _ in self.terms)

    @cached_property
    def words(self) -> FrozenSet[str]:
        return frozenset(_WORD_RE.findall(self.plain_text()))


def field_terms(text: str, base_weight: int) -> List[Tuple[str, int]]:
    terms: List[Tuple[str, int]] = []
    for token in split_tokens(normalize_text(text)):
        cleaned = _EDGE_PUNCT_RE.sub("", token)
        if not cleaned:
            continue
        terms.append((cleaned, max(base_weight - len(terms), MIN_WEIGHT)))
    return terms


def build_vector(text: "ItemText") -> WeightedVector:
    terms: List[Tuple[str, int]] = []
    for attr, base_weight in FIELD_WEIGHTS:
        value = getattr(text, attr, "") or ""
        terms.extend(field_terms(value, base_weight))
    for tag in text.tags:
        terms.extend(field_terms(tag, TAG_WEIGHT))
    for finish in text.finishes:
        terms.extend(field_terms(finish, FINISH_WEIGHT))
    return WeightedVector(tuple(terms))


def build_item_vectors(item: "CatalogItem") -> Dict[Tuple[str, str], WeightedVector]:
    return {(item.id, language): build_vector(text) for language, text in item.texts.items()}


def parse_vector(blob: str) -> WeightedVector:
    """Parse a serialized vector blob.

    Raises ``ValueError`` when an entry has no weight prefix or a weight that
    is not a positive integer.
    """

    terms: List[Tuple[str, int]] = []
    for entry in (blob or "").split():
        weight, sep, term = entry.partition(":")
        if not sep or not term:
            raise ValueError(f"Malformed vector entry {entry!r}")
        value = int(weight)
        if value < MIN_WEIGHT:
            raise ValueError(f"Non-positive weight in vector entry {entry!r}")
        terms.append((term, value))
    return WeightedVector(tuple(terms))
