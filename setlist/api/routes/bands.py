"""
Band routes.

Exposes:
- GET /api/bands: paginated band list (q full-text, or genre, or all)
- GET /api/bands/{slug}: band detail with genres and upcoming shows
- GET /api/bands/{slug}/similar: bands ranked by shared genres
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from setlist.api.deps import get_queries
from setlist.db.queries import Queries
from setlist.schemas.bands import BandDetailResponse, BandListResponse, SimilarBandsResponse
from setlist.schemas.common import ErrorResponse
from setlist.services import bands as band_service
from setlist.services.pagination import parse_limit, resolve_pagination

router = APIRouter(prefix="/api/bands", tags=["Bands"])


@router.get(
    "",
    summary="List bands",
    response_model=BandListResponse,
    responses={400: {"model": ErrorResponse}},
)
def list_bands(
    page: Optional[str] = Query(None, description="Page number, default 1"),
    per_page: Optional[str] = Query(None, description="Items per page, default 50, at most 100"),
    q: Optional[str] = Query(None, description="Full-text search over name, bio and hometown"),
    genre: Optional[List[str]] = Query(None, description="Genre slug or id; repeat for several"),
    queries: Queries = Depends(get_queries),
) -> BandListResponse:
    pagination = resolve_pagination(page, per_page)
    band_filter = band_service.resolve_band_filter(q=q, genres=genre)
    return band_service.list_bands(queries, pagination, band_filter)


@router.get(
    "/{slug}",
    summary="Get band",
    response_model=BandDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_band(slug: str, queries: Queries = Depends(get_queries)) -> BandDetailResponse:
    return BandDetailResponse(data=band_service.get_band(queries, slug))


@router.get(
    "/{slug}/similar",
    summary="Similar bands",
    response_model=SimilarBandsResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def similar_bands(
    slug: str,
    limit: Optional[str] = Query(None, description="Default 10; values above 50 are clamped"),
    queries: Queries = Depends(get_queries),
) -> SimilarBandsResponse:
    """Bands sharing at least one genre, most shared genres first. Never includes the band itself."""
    resolved = parse_limit(limit, band_service.DEFAULT_SIMILAR_LIMIT, band_service.MAX_SIMILAR_LIMIT)
    return SimilarBandsResponse(data=band_service.get_similar_bands(queries, slug, resolved))
