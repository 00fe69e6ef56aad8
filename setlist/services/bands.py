"""
Band listing, detail and similar bands.

Band lists pick one filter, first match wins: q (full-text) > genre > all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from setlist.core.errors import NotFound, persistence_errors
from setlist.core.logging import get_logger
from setlist.db.models import Band
from setlist.db.queries import Queries
from setlist.schemas.bands import BandDetail, BandListItem, BandListResponse, SimilarBandItem
from setlist.schemas.genres import GenreBasic
from setlist.services.attachments import attach_genres, load_genres_for_bands
from setlist.services.converters import (
    band_detail,
    band_list_item,
    band_upcoming_show,
    bands_to_list_items,
    genre_basic,
    similar_band_item,
)
from setlist.services.pagination import Pagination, build_meta

logger = get_logger("setlist.bands")

DEFAULT_SIMILAR_LIMIT = 10
MAX_SIMILAR_LIMIT = 50


class BandFilterKind(str, Enum):
    SEARCH = "search"
    GENRE = "genre"
    ALL = "all"


@dataclass(frozen=True)
class BandFilter:
    kind: BandFilterKind
    query: str = ""
    values: Tuple[str, ...] = ()


# PUBLIC_INTERFACE
def resolve_band_filter(q: Optional[str] = None, genres: Optional[Sequence[str]] = None) -> BandFilter:
    query = (q or "").strip()
    if query:
        return BandFilter(BandFilterKind.SEARCH, query=query)
    values = tuple(value for value in (genres or ()) if value)
    if values:
        return BandFilter(BandFilterKind.GENRE, values=values)
    return BandFilter(BandFilterKind.ALL)


def _fetch(queries: Queries, pagination: Pagination, band_filter: BandFilter) -> Tuple[List[BandListItem], int]:
    limit, offset = pagination.per_page, pagination.offset
    if band_filter.kind is BandFilterKind.SEARCH:
        return bands_to_list_items(queries.search_bands(band_filter.query, limit, offset))
    if band_filter.kind is BandFilterKind.GENRE:
        rows = queries.list_bands_by_genre(band_filter.values, limit, offset)
        total = queries.count_bands_by_genre(band_filter.values)
        return [band_list_item(row) for row in rows], total
    return bands_to_list_items(queries.list_bands(limit, offset))


# PUBLIC_INTERFACE
def list_bands(queries: Queries, pagination: Pagination, band_filter: BandFilter) -> BandListResponse:
    with persistence_errors("list bands", filter=band_filter.kind.value):
        items, total = _fetch(queries, pagination, band_filter)
    attach_genres(queries, items)
    return BandListResponse(data=items, meta=build_meta(pagination, total))


def _require_band(queries: Queries, slug: str) -> Band:
    with persistence_errors("get band", slug=slug):
        band = queries.get_band_by_slug(slug)
    if band is None:
        raise NotFound("Band")
    return band


# PUBLIC_INTERFACE
def get_band(queries: Queries, slug: str) -> BandDetail:
    """Band with its genres and every future show it plays."""
    band = _require_band(queries, slug)
    detail = band_detail(band)

    try:
        detail.genres = [genre_basic(row) for row in queries.get_band_genres(band.id)]
    except SQLAlchemyError as exc:
        logger.error("failed to get band genres", extra={"band_id": band.id, "error": str(exc)})
        queries.reset()

    with persistence_errors("get band shows", band_id=band.id):
        detail.upcoming_shows = [band_upcoming_show(row) for row in queries.get_band_upcoming_shows(band.id)]
    return detail


def _shared_genres(source: Dict[int, GenreBasic], candidate: Sequence[GenreBasic]) -> List[GenreBasic]:
    return [genre for genre in candidate if genre.id in source]


# PUBLIC_INTERFACE
def get_similar_bands(queries: Queries, slug: str, limit: int) -> List[SimilarBandItem]:
    """Bands sharing genres with `slug`, ranked by shared genre count.

    `shared_genres` is recomputed from both bands' genre sets; disagreement
    with the ranking query's `shared_genre_count` is logged.
    """
    band = _require_band(queries, slug)

    with persistence_errors("get source band genres", band_id=band.id):
        source = {row.id: genre_basic(row) for row in queries.get_band_genres(band.id)}

    with persistence_errors("get similar bands", band_id=band.id):
        items = [similar_band_item(row) for row in queries.get_similar_bands(band.id, limit)]

    if not items:
        return items

    candidate_ids = [item.id for item in items]
    try:
        genres = load_genres_for_bands(queries, candidate_ids)
    except SQLAlchemyError as exc:
        logger.error(
            "failed to load genres for similar bands",
            extra={"band_id": band.id, "candidate_ids": candidate_ids, "error": str(exc)},
        )
        queries.reset()
        return items

    for item in items:
        item.shared_genres = _shared_genres(source, genres.get(item.id, []))
        if len(item.shared_genres) != item.shared_genre_count:
            logger.warning(
                "shared genre count mismatch",
                extra={
                    "band_id": band.id,
                    "similar_band_id": item.id,
                    "shared_genre_count": item.shared_genre_count,
                    "shared_genres": len(item.shared_genres),
                },
            )
    return items
