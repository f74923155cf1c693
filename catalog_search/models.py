"""Pydantic models for request/response payloads."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ProductResult(BaseModel):
    id: str
    ean: str | None = None
    code: str | None = None
    name: str | None = None
    secondaryName: str | None = None
    feature1: str | None = None
    feature2: str | None = None
    collection: str | None = None
    price: float | None = None
    promoPrice: float | None = None
    currency: str | None = None
    promoted: bool = False
    inStock: bool = False
    stockQuantity: int = 0
    image: str | None = None
    tier: str
    avgSimilarity: float = 0.0
    avgSimilarityWithoutWorst: float = 0.0


class FinishFacet(BaseModel):
    id: int
    label: str


class SearchResponse(BaseModel):
    query: str
    normalized: str
    language: str
    tier: str
    results: list[ProductResult]
    total: int = Field(..., description="Candidates matching the query and filters before pagination")
    pages: int
    page: int
    limit: int
    zones: list[str]
    finishes: list[FinishFacet]
    took_ms: float


class HealthResponse(BaseModel):
    snapshot_version: int
    items: int
    vectors: int
    catalog_source: str
