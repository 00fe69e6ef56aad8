"""
Venue listing and detail.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from setlist.core.errors import NotFound, persistence_errors
from setlist.db.queries import Queries
from setlist.schemas.venues import VenueDetail, VenueListItem
from setlist.services.attachments import attach_bands
from setlist.services.converters import venue_list_item, venue_upcoming_show

VENUE_UPCOMING_SHOWS_LIMIT = 50


# PUBLIC_INTERFACE
def list_venues(queries: Queries, regions: Optional[Sequence[str]] = None) -> List[VenueListItem]:
    """All venues by name with their upcoming show counts, optionally limited to regions."""
    regions = [region for region in (regions or ()) if region]
    with persistence_errors("list venues", regions=regions):
        if regions:
            rows = queries.list_venues_by_region(regions)
        else:
            rows = queries.list_venues_with_show_count()
    return [venue_list_item(row) for row in rows]


# PUBLIC_INTERFACE
def get_venue(queries: Queries, slug: str) -> VenueDetail:
    with persistence_errors("get venue", slug=slug):
        venue = queries.get_venue_by_slug(slug)
    if venue is None:
        raise NotFound("Venue")

    detail = VenueDetail.model_validate(venue, from_attributes=True)
    with persistence_errors("get venue shows", venue_id=venue.id):
        rows = queries.get_venue_upcoming_shows(venue.id, VENUE_UPCOMING_SHOWS_LIMIT)
    detail.upcoming_shows = [venue_upcoming_show(row) for row in rows]
    attach_bands(queries, detail.upcoming_shows)
    return detail
