"""
Global search route.

Exposes:
- GET /api/search: shows, bands and venues matching q
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from setlist.api.deps import get_queries
from setlist.db.queries import Queries
from setlist.schemas.common import ErrorResponse
from setlist.schemas.search import SearchResponse
from setlist.services.search import global_search, validate_search_params

router = APIRouter(prefix="/api/search", tags=["Search"])


@router.get(
    "",
    summary="Search shows, bands and venues",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}},
)
def search(
    q: Optional[str] = Query(None, description="Search text, at least 2 characters"),
    limit: Optional[str] = Query(None, description="Per category, default 20; values above 50 are clamped"),
    queries: Queries = Depends(get_queries),
) -> SearchResponse:
    """
    Search every category independently. A category whose query fails comes
    back empty; the other categories are unaffected.
    """
    query, resolved = validate_search_params(q, limit)
    return SearchResponse(data=global_search(queries, query, resolved))
