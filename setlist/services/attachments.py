"""
Batch attachment of child collections onto list items.

Exposes:
- load_bands_for_shows / load_genres_for_bands: one round trip per parent id set,
  returning a mapping that holds every requested id (empty list when childless)
- attach_bands / attach_genres: best-effort merge by id onto response items;
  a failed load is logged and leaves the children empty
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from setlist.core.logging import get_logger
from setlist.db.queries import Queries
from setlist.schemas.genres import GenreBasic
from setlist.schemas.shows import BandBasic
from setlist.services.converters import band_basic, genre_basic

logger = get_logger("setlist.attachments")


class HasBands(Protocol):
    id: int
    bands: List[BandBasic]


class HasGenres(Protocol):
    id: int
    genres: List[GenreBasic]


def _unique(ids: Iterable[int]) -> List[int]:
    return list(dict.fromkeys(ids))


# PUBLIC_INTERFACE
def load_bands_for_shows(queries: Queries, show_ids: Sequence[int]) -> Dict[int, List[BandBasic]]:
    """Lineups keyed by show id, in running order."""
    ids = _unique(show_ids)
    mapping: Dict[int, List[BandBasic]] = {show_id: [] for show_id in ids}
    if not ids:
        return mapping
    for row in queries.get_show_bands_batch(ids):
        mapping.setdefault(row.show_id, []).append(band_basic(row))
    return mapping


# PUBLIC_INTERFACE
def load_genres_for_bands(queries: Queries, band_ids: Sequence[int]) -> Dict[int, List[GenreBasic]]:
    """Genres keyed by band id, ordered by name."""
    ids = _unique(band_ids)
    mapping: Dict[int, List[GenreBasic]] = {band_id: [] for band_id in ids}
    if not ids:
        return mapping
    for row in queries.get_band_genres_batch(ids):
        mapping.setdefault(row.band_id, []).append(genre_basic(row))
    return mapping


# PUBLIC_INTERFACE
def attach_bands(queries: Queries, shows: Sequence[HasBands]) -> None:
    """Fill `bands` on each show; on failure the shows keep empty lineups."""
    if not shows:
        return
    show_ids = [show.id for show in shows]
    try:
        lineups = load_bands_for_shows(queries, show_ids)
    except SQLAlchemyError as exc:
        logger.error("failed to load bands for shows", extra={"show_ids": show_ids, "error": str(exc)})
        queries.reset()
        return
    for show in shows:
        show.bands = lineups.get(show.id, [])


# PUBLIC_INTERFACE
def attach_genres(queries: Queries, bands: Sequence[HasGenres]) -> None:
    """Fill `genres` on each band; on failure the bands keep empty genre lists."""
    if not bands:
        return
    band_ids = [band.id for band in bands]
    try:
        genres = load_genres_for_bands(queries, band_ids)
    except SQLAlchemyError as exc:
        logger.error("failed to load genres for bands", extra={"band_ids": band_ids, "error": str(exc)})
        queries.reset()
        return
    for band in bands:
        band.genres = genres.get(band.id, [])
