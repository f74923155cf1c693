"""Exceptions raised along the search path."""
from __future__ import annotations


class SearchError(Exception):
    """Base class for errors the caller is expected to handle."""


class UnsupportedLanguage(SearchError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"Unsupported language tag: {tag!r}")
        self.tag = tag


class EmptyQuery(SearchError):
    def __init__(self, raw_query: str) -> None:
        super().__init__("Query is empty after normalization")
        self.raw_query = raw_query


class InvalidPagination(SearchError):
    def __init__(self, page: int, limit: int, reason: str) -> None:
        super().__init__(f"Invalid pagination page={page} limit={limit}: {reason}")
        self.page = page
        self.limit = limit


class SearchTimeout(SearchError):
    def __init__(self, deadline_ms: float) -> None:
        super().__init__(f"Search exceeded deadline of {deadline_ms:.0f} ms")
        self.deadline_ms = deadline_ms


class VectorMissing(SearchError):
    """No weighted vector is published for an (item, language) pair.

    Raised by the catalog snapshot and absorbed by the query path, which logs
    it and drops the item instead of failing the whole request.
    """

    def __init__(self, item_id: str, language: str) -> None:
        super().__init__(f"No weighted vector for item={item_id!r} language={language!r}")
        self.item_id = item_id
        self.language = language
