"""
Genre routes.

Exposes:
- GET /api/genres: every genre with its show count
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from setlist.api.deps import get_queries
from setlist.db.queries import Queries
from setlist.schemas.genres import GenreListResponse
from setlist.services.genres import list_genres

router = APIRouter(prefix="/api/genres", tags=["Genres"])


@router.get("", summary="List genres", response_model=GenreListResponse)
def genres(queries: Queries = Depends(get_queries)) -> GenreListResponse:
    return GenreListResponse(data=list_genres(queries))
