"""Elasticsearch client factory.

Elasticsearch is one of the catalog stores the snapshot can be loaded from.
The rest of the code works against the official synchronous client; blocking
calls are wrapped via ``asyncio.to_thread`` by the caller where necessary.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Iterator

from elasticsearch import Elasticsearch, helpers
from elasticsearch.exceptions import NotFoundError

from .config import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_client() -> Elasticsearch:
    logger.info("Connecting to Elasticsearch at %s", settings.es_host)
    return Elasticsearch(settings.es_host)


def scan_documents(es: Elasticsearch, index: str) -> Iterator[Dict[str, Any]]:
    """Yield the ``_source`` of every document in ``index``."""

    try:
        for hit in helpers.scan(es, index=index, query={"query": {"match_all": {}}}):
            yield hit.get("_source", {})
    except NotFoundError:
        logger.warning("Catalog index %s does not exist", index)
        return
