"""
Show routes: list with filters, detail, and band submissions.

Exposes:
- GET /api/shows: paginated show list, one filter applied (see services.shows)
- GET /api/shows/{id}: show detail with venue and lineup
- POST /api/shows: band-submitted show
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from setlist.api.deps import get_queries
from setlist.db.queries import Queries
from setlist.schemas.common import ErrorResponse
from setlist.schemas.shows import CreateShowRequest, CreateShowResponse, ShowDetailResponse, ShowListResponse
from setlist.services import shows as show_service
from setlist.services import submissions
from setlist.services.pagination import resolve_pagination

router = APIRouter(prefix="/api/shows", tags=["Shows"])


@router.get(
    "",
    summary="List shows",
    response_model=ShowListResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def list_shows(
    page: Optional[str] = Query(None, description="Page number, default 1"),
    per_page: Optional[str] = Query(None, description="Items per page, default 50, at most 100"),
    filter_name: Optional[str] = Query(None, alias="filter", description="tonight, this-weekend or free"),
    venue: Optional[List[str]] = Query(None, description="Venue slug; repeat for several"),
    region: Optional[List[str]] = Query(None, description="Region; repeat for several"),
    genre: Optional[List[str]] = Query(None, description="Genre slug or id; repeat for several"),
    date_from: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601 timestamp"),
    date_to: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601 timestamp"),
    queries: Queries = Depends(get_queries),
) -> ShowListResponse:
    """
    List shows. Exactly one filter applies, first match wins:
    filter=tonight, filter=this-weekend, filter=free, venue, region, genre,
    date_from/date_to, otherwise upcoming shows.

    tonight and this-weekend return every matching show and ignore paging.
    """
    pagination = resolve_pagination(page, per_page)
    show_filter = show_service.resolve_show_filter(
        filter_name=filter_name,
        venues=venue,
        regions=region,
        genres=genre,
        date_from=date_from,
        date_to=date_to,
    )
    return show_service.list_shows(queries, pagination, show_filter)


@router.get(
    "/{show_id}",
    summary="Get show",
    response_model=ShowDetailResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_show(show_id: str, queries: Queries = Depends(get_queries)) -> ShowDetailResponse:
    """Show detail with description, venue and the lineup in running order."""
    return ShowDetailResponse(data=show_service.get_show(queries, show_service.parse_show_id(show_id)))


@router.post(
    "",
    summary="Submit a show",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateShowResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def submit_show(payload: CreateShowRequest, queries: Queries = Depends(get_queries)) -> CreateShowResponse:
    """
    Submit a show for a venue.

    Bands are matched by exact name or created. A band that cannot be stored or
    linked is skipped; the show is still created.
    """
    return CreateShowResponse(data=submissions.create_show(queries, payload))
