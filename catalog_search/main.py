"""FastAPI application wiring the search service."""
from __future__ import annotations

import asyncio
import logging

from fastapi import Depends, FastAPI, HTTPException, Query

from .config import settings
from .errors import EmptyQuery, InvalidPagination, SearchTimeout, UnsupportedLanguage
from .importer import reload_catalog
from .models import HealthResponse, SearchResponse
from .search_service import SearchQuery, SearchService, get_search_service

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_LEVEL = logging.getLevelName(settings.log_level.upper())

# ``force=True`` replaces uvicorn's default handlers so search timing lines
# share one format with the server logs.
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, force=True)
for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "elastic_transport"):
    logging.getLogger(name).setLevel(LOG_LEVEL)

logger = logging.getLogger(__name__)
logger.info("Logging configured at %s", settings.log_level.upper())

app = FastAPI(title="Catalog Search Service")


@app.on_event("startup")
async def startup_event() -> None:
    if not settings.load_on_startup:
        return
    service = get_search_service()
    snapshot = await asyncio.to_thread(reload_catalog, service.repository)
    logger.info("Published catalog snapshot version=%s on startup", snapshot.version)


@app.get("/health", response_model=HealthResponse)
async def health(service: SearchService = Depends(get_search_service)) -> HealthResponse:
    snapshot = service.repository.current()
    return HealthResponse(
        snapshot_version=snapshot.version,
        items=len(snapshot.items),
        vectors=len(snapshot.vectors),
        catalog_source=settings.catalog_source,
    )


@app.get("/search", response_model=SearchResponse)
async def search(
    q: str = Query("", description="Search query"),
    lang: str = Query(settings.default_language, description="Language tag"),
    page: int = 1,
    limit: int = settings.default_page_size,
    zone: list[str] = Query(default=[]),
    finish: list[int] = Query(default=[]),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    query = SearchQuery(
        text=q,
        language=lang,
        page=page,
        limit=limit,
        zones=tuple(zone),
        finishes=tuple(finish),
    )
    try:
        payload = await asyncio.to_thread(service.search_products, query)
    except (UnsupportedLanguage, InvalidPagination, EmptyQuery) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SearchTimeout as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    return SearchResponse(**payload)


@app.post("/reload")
async def reload(service: SearchService = Depends(get_search_service)) -> dict:
    snapshot = await asyncio.to_thread(reload_catalog, service.repository)
    return {"snapshot_version": snapshot.version, "items": len(snapshot.items)}
