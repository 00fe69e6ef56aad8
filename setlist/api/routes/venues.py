"""
Venue routes.

Exposes:
- GET /api/venues: every venue with its upcoming show count, optionally by region
- GET /api/venues/{slug}: venue detail with up to 50 upcoming shows
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from setlist.api.deps import get_queries
from setlist.db.queries import Queries
from setlist.schemas.common import ErrorResponse
from setlist.schemas.venues import VenueDetailResponse, VenueListResponse
from setlist.services import venues as venue_service

router = APIRouter(prefix="/api/venues", tags=["Venues"])


@router.get("", summary="List venues", response_model=VenueListResponse)
def list_venues(
    region: Optional[List[str]] = Query(None, description="Region; repeat for several"),
    queries: Queries = Depends(get_queries),
) -> VenueListResponse:
    return VenueListResponse(data=venue_service.list_venues(queries, region))


@router.get(
    "/{slug}",
    summary="Get venue",
    response_model=VenueDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_venue(slug: str, queries: Queries = Depends(get_queries)) -> VenueDetailResponse:
    return VenueDetailResponse(data=venue_service.get_venue(queries, slug))
