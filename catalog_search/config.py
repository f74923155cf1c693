"""Application configuration and constants."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_bool(name: str, default: str) -> bool:
    return _get_env(name, default).lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    """Simple settings container with environment variable overrides."""

    catalog_source: str = _get_env("CATALOG_SOURCE", "file")
    catalog_path: str = _get_env("CATALOG_PATH", "data/catalog.sample.json")
    es_host: str = _get_env("ES_HOST", "http://localhost:9200")
    es_index: str = _get_env("ES_INDEX", "catalog")
    redis_host: str = _get_env("REDIS_HOST", "localhost")
    redis_port: int = int(_get_env("REDIS_PORT", "6379"))
    cache_enabled: bool = _get_bool("CACHE_ENABLED", "true")
    cache_ttl_seconds: int = int(_get_env("CACHE_TTL_SECONDS", "300"))
    default_language: str = _get_env("DEFAULT_LANGUAGE", "en")
    # Empty means unknown language tags are rejected instead of replaced.
    language_fallback: str = _get_env("LANGUAGE_FALLBACK", "")
    empty_query_policy: str = _get_env("EMPTY_QUERY_POLICY", "match_all")
    similarity_threshold: float = float(_get_env("SIMILARITY_THRESHOLD", "0.35"))
    weight_bonus: float = float(_get_env("WEIGHT_BONUS", "0.01"))
    default_page_size: int = int(_get_env("DEFAULT_PAGE_SIZE", "24"))
    max_page_size: int = int(_get_env("MAX_PAGE_SIZE", "100"))
    query_timeout_ms: int = int(_get_env("QUERY_TIMEOUT_MS", "0"))
    load_on_startup: bool = _get_bool("LOAD_ON_STARTUP", "true")
    log_level: str = _get_env("LOG_LEVEL", "INFO")


settings = Settings()
