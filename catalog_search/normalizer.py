"""Query and field text normalization.

Pipeline applied to every query before tokenization:

    1) :func:`trim_connectors` drops language-specific connector words from
       the interior of the query. The first and last tokens always survive,
       since they usually carry the search intent ("sink for bathroom" ->
       "sink bathroom", while "a sink" stays as typed).
    2) :func:`strip_diacritics` folds accented Latin letters to their base
       form with ``unidecode`` (``"ń"`` -> ``"n"``, ``"ß"`` -> ``"ss"``).
       Cyrillic is left in place so ru/uk queries keep matching stored
       Cyrillic text.
    3) Everything is uppercased, which is the case the weighted vectors are
       stored in.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from typing import List, Sequence

from unidecode import unidecode

from .languages import connector_words

logger = logging.getLogger(__name__)

# Query tokens are separated by commas and/or whitespace.
TOKEN_SPLIT_RE = re.compile(r"[\s,]+")
_CYRILLIC_FOLDS = str.maketrans({"ё": "е", "Ё": "Е"})


def split_tokens(text: str) -> List[str]:
    return [token for token in TOKEN_SPLIT_RE.split(text or "") if token]


def _is_latin(ch: str) -> bool:
    return unicodedata.name(ch, "").startswith("LATIN")


def strip_diacritics(text: str) -> str:
    """Remove diacritics from Latin characters, leaving other scripts intact."""

    if not text:
        return ""
    composed = unicodedata.normalize("NFC", text).translate(_CYRILLIC_FOLDS)
    if composed.isascii():
        return composed
    folded: List[str] = []
    for ch in composed:
        if ch.isascii():
            folded.append(ch)
        elif unicodedata.combining(ch):
            # Stray combining marks that did not compose into a letter.
            continue
        elif _is_latin(ch):
            folded.append(unidecode(ch))
        else:
            folded.append(ch)
    return "".join(folded)


def trim_connectors(tokens: Sequence[str], language: str) -> List[str]:
    """Drop connector words strictly between the first and last token."""

    if len(tokens) <= 2:
        return list(tokens)
    connectors = connector_words(language)
    interior = [token for token in tokens[1:-1] if token.lower() not in connectors]
    trimmed = [tokens[0], *interior, tokens[-1]]
    if len(trimmed) != len(tokens):
        logger.debug("trim_connectors language=%s tokens=%s -> %s", language, list(tokens), trimmed)
    return trimmed


def normalize_text(text: str) -> str:
    """Fold a catalog or query fragment: diacritics off, uppercase, compact."""

    return " ".join(strip_diacritics(text).upper().split())


def normalize_query(text: str, language: str) -> str:
    tokens = split_tokens(text)
    trimmed = trim_connectors(tokens, language)
    normalized = normalize_text(" ".join(trimmed))
    logger.debug(
        "normalize_query raw=%r language=%s tokens=%s normalized=%r",
        text,
        language,
        tokens,
        normalized,
    )
    return normalized
