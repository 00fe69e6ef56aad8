"""
Show listing and detail.

A show list request selects exactly one filter, resolved once from the query
string in a fixed order (first match wins):

    filter=tonight > filter=this-weekend > filter=free > venue > region > genre
    > date_from/date_to > upcoming

Pagination is resolved by the caller before the filter; tonight and
this-weekend ignore it and return every show in their window.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from setlist.core.errors import InvalidParameter, NotFound, persistence_errors
from setlist.db.models import MAX_ID, MIN_ID
from setlist.db.queries import Queries
from setlist.schemas.shows import ShowDetail, ShowListItem, ShowListResponse
from setlist.services.attachments import attach_bands, attach_genres
from setlist.services.converters import (
    band_for_show,
    show_detail,
    show_list_item,
    shows_to_list_items,
    window_shows_to_list_items,
)
from setlist.services.dates import parse_date_range, today_window, weekend_window
from setlist.services.pagination import Pagination, build_meta

_SHOW_ID = re.compile(r"-?[0-9]+")


class ShowFilterKind(str, Enum):
    TONIGHT = "tonight"
    THIS_WEEKEND = "this-weekend"
    FREE = "free"
    VENUE = "venue"
    REGION = "region"
    GENRE = "genre"
    DATE_RANGE = "date_range"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class ShowFilter:
    """The one filter applied to a show list request."""

    kind: ShowFilterKind
    values: Tuple[str, ...] = ()
    start: Optional[datetime] = None
    end: Optional[datetime] = None


def _present(values: Optional[Sequence[str]]) -> Tuple[str, ...]:
    return tuple(value for value in (values or ()) if value)


# PUBLIC_INTERFACE
def resolve_show_filter(
    filter_name: Optional[str] = None,
    venues: Optional[Sequence[str]] = None,
    regions: Optional[Sequence[str]] = None,
    genres: Optional[Sequence[str]] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> ShowFilter:
    """Pick the filter for a request. Only a malformed date range can fail."""
    if filter_name == ShowFilterKind.TONIGHT.value:
        return ShowFilter(ShowFilterKind.TONIGHT)
    if filter_name == ShowFilterKind.THIS_WEEKEND.value:
        return ShowFilter(ShowFilterKind.THIS_WEEKEND)
    if filter_name == ShowFilterKind.FREE.value:
        return ShowFilter(ShowFilterKind.FREE)

    for kind, values in (
        (ShowFilterKind.VENUE, venues),
        (ShowFilterKind.REGION, regions),
        (ShowFilterKind.GENRE, genres),
    ):
        present = _present(values)
        if present:
            return ShowFilter(kind, values=present)

    if date_from or date_to:
        start, end = parse_date_range(date_from, date_to)
        return ShowFilter(ShowFilterKind.DATE_RANGE, start=start, end=end)

    return ShowFilter(ShowFilterKind.UPCOMING)


def _fetch(queries: Queries, pagination: Pagination, show_filter: ShowFilter) -> Tuple[List[ShowListItem], int]:
    kind = show_filter.kind
    limit, offset = pagination.per_page, pagination.offset

    if kind is ShowFilterKind.TONIGHT:
        return window_shows_to_list_items(queries.list_shows_tonight(*today_window()))
    if kind is ShowFilterKind.THIS_WEEKEND:
        return window_shows_to_list_items(queries.list_shows_this_weekend(*weekend_window()))
    if kind is ShowFilterKind.FREE:
        return shows_to_list_items(queries.list_free_shows(limit, offset))
    if kind is ShowFilterKind.VENUE:
        return shows_to_list_items(queries.list_shows_by_venue(show_filter.values, limit, offset))
    if kind is ShowFilterKind.REGION:
        return shows_to_list_items(queries.list_shows_by_region(show_filter.values, limit, offset))
    if kind is ShowFilterKind.GENRE:
        rows = queries.list_shows_by_genre(show_filter.values, limit, offset)
        total = queries.count_shows_by_genre(show_filter.values)
        return [show_list_item(row) for row in rows], total
    if kind is ShowFilterKind.DATE_RANGE:
        return shows_to_list_items(
            queries.list_shows_by_date_range(show_filter.start, show_filter.end, limit, offset)
        )
    return shows_to_list_items(queries.list_upcoming_shows(limit, offset))


# PUBLIC_INTERFACE
def list_shows(queries: Queries, pagination: Pagination, show_filter: ShowFilter) -> ShowListResponse:
    """Run the selected filter, attach lineups and wrap the page."""
    with persistence_errors("list shows", filter=show_filter.kind.value):
        items, total = _fetch(queries, pagination, show_filter)
    attach_bands(queries, items)
    return ShowListResponse(data=items, meta=build_meta(pagination, total))


# PUBLIC_INTERFACE
def parse_show_id(raw: str) -> int:
    if not _SHOW_ID.fullmatch(raw) or not MIN_ID <= int(raw) <= MAX_ID:
        raise InvalidParameter("id", "must be a valid integer")
    return int(raw)


# PUBLIC_INTERFACE
def get_show(queries: Queries, show_id: int) -> ShowDetail:
    """Show with venue and full lineup; each band carries its genres when they load."""
    with persistence_errors("get show", show_id=show_id):
        row = queries.get_show_by_id(show_id)
    if row is None:
        raise NotFound("Show")

    detail = show_detail(row)
    with persistence_errors("get show bands", show_id=show_id):
        detail.bands = [band_for_show(band) for band in queries.get_show_bands(show_id)]

    attach_genres(queries, detail.bands)
    return detail
