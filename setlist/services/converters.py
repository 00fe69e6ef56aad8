"""
Row to response-item converters.

Each list query returns rows with the same core columns plus a `total_count`
window column. Converters turn a row list into (items, total): an empty row
list gives ([], 0), otherwise the total is read off the first row. Child
collections start empty and are filled in by the attachment loader.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from setlist.schemas.bands import BandDetail, BandListItem, BandUpcomingShow, SimilarBandItem
from setlist.schemas.genres import GenreBasic, GenreListItem
from setlist.schemas.search import SearchBand, SearchShow, SearchVenue
from setlist.schemas.shows import BandBasic, BandForShow, ShowDetail, ShowListItem, VenueBasic, VenueForShow
from setlist.schemas.venues import VenueListItem, VenueUpcomingShow


def price(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _total(rows: Sequence[Any]) -> int:
    if not rows:
        return 0
    return int(rows[0].total_count)


def venue_basic(row: Any) -> VenueBasic:
    """Venue projection from the `venue_*` columns of a show row."""
    return VenueBasic(
        id=row.venue_id,
        name=row.venue_name,
        slug=row.venue_slug,
        region=row.venue_region,
        address=row.venue_address,
        image_url=row.venue_image_url,
    )


def show_list_item(row: Any) -> ShowListItem:
    return ShowListItem(
        id=row.id,
        title=row.title,
        image_url=row.image_url,
        date=row.date,
        doors_time=row.doors_time,
        show_time=row.show_time,
        price_min=price(row.price_min),
        price_max=price(row.price_max),
        ticket_url=row.ticket_url,
        age_restriction=row.age_restriction,
        status=row.status,
        venue=venue_basic(row),
        bands=[],
    )


# PUBLIC_INTERFACE
def shows_to_list_items(rows: Sequence[Any]) -> Tuple[List[ShowListItem], int]:
    """Paginated show rows carrying `total_count`."""
    return [show_list_item(row) for row in rows], _total(rows)


# PUBLIC_INTERFACE
def window_shows_to_list_items(rows: Sequence[Any]) -> Tuple[List[ShowListItem], int]:
    """Unpaginated date-window rows (tonight, this weekend): total is the row count."""
    items = [show_list_item(row) for row in rows]
    return items, len(items)


# PUBLIC_INTERFACE
def show_detail(row: Any) -> ShowDetail:
    return ShowDetail(
        id=row.id,
        title=row.title,
        description=row.description,
        image_url=row.image_url,
        date=row.date,
        doors_time=row.doors_time,
        show_time=row.show_time,
        price_min=price(row.price_min),
        price_max=price(row.price_max),
        ticket_url=row.ticket_url,
        age_restriction=row.age_restriction,
        status=row.status,
        venue=VenueForShow(
            id=row.venue_id,
            name=row.venue_name,
            slug=row.venue_slug,
            address=row.venue_address,
            region=row.venue_region,
            website=row.venue_website,
            image_url=row.venue_image_url,
        ),
        bands=[],
    )


def band_basic(row: Any) -> BandBasic:
    return BandBasic(
        id=row.id,
        name=row.name,
        slug=row.slug,
        image_url=row.image_url,
        is_headliner=bool(row.is_headliner),
        performance_order=row.performance_order or 0,
    )


def band_for_show(row: Any) -> BandForShow:
    return BandForShow(
        id=row.id,
        name=row.name,
        slug=row.slug,
        bio=row.bio,
        image_url=row.image_url,
        spotify_url=row.spotify_url,
        website=row.website,
        is_headliner=bool(row.is_headliner),
        performance_order=row.performance_order or 0,
        genres=[],
    )


def genre_basic(row: Any) -> GenreBasic:
    return GenreBasic(id=row.id, name=row.name, slug=row.slug)


def band_list_item(row: Any) -> BandListItem:
    return BandListItem(
        id=row.id,
        name=row.name,
        slug=row.slug,
        bio=row.bio,
        hometown=row.hometown,
        image_url=row.image_url,
        genres=[],
    )


# PUBLIC_INTERFACE
def bands_to_list_items(rows: Sequence[Any]) -> Tuple[List[BandListItem], int]:
    """Paginated band rows carrying `total_count`."""
    return [band_list_item(row) for row in rows], _total(rows)


# PUBLIC_INTERFACE
def band_detail(band: Any) -> BandDetail:
    """Band entity without genres or shows; those are loaded separately."""
    return BandDetail(
        id=band.id,
        name=band.name,
        slug=band.slug,
        bio=band.bio,
        hometown=band.hometown,
        image_url=band.image_url,
        website=band.website,
        spotify_url=band.spotify_url,
        instagram=band.instagram,
        facebook=band.facebook,
        bandcamp_url=band.bandcamp_url,
        genres=[],
        upcoming_shows=[],
    )


# PUBLIC_INTERFACE
def band_upcoming_show(row: Any) -> BandUpcomingShow:
    return BandUpcomingShow(
        id=row.id,
        date=row.date,
        venue=venue_basic(row),
        is_headliner=bool(row.is_headliner),
    )


# PUBLIC_INTERFACE
def similar_band_item(row: Any) -> SimilarBandItem:
    return SimilarBandItem(
        id=row.id,
        name=row.name,
        slug=row.slug,
        image_url=row.image_url,
        shared_genre_count=int(row.shared_genre_count),
        shared_genres=[],
    )


# PUBLIC_INTERFACE
def venue_list_item(row: Any) -> VenueListItem:
    return VenueListItem(
        id=row.id,
        name=row.name,
        slug=row.slug,
        address=row.address,
        region=row.region,
        capacity=row.capacity,
        website=row.website,
        image_url=row.image_url,
        upcoming_show_count=int(row.upcoming_show_count or 0),
    )


# PUBLIC_INTERFACE
def venue_upcoming_show(row: Any) -> VenueUpcomingShow:
    return VenueUpcomingShow(
        id=row.id,
        title=row.title,
        date=row.date,
        price_min=price(row.price_min),
        price_max=price(row.price_max),
        bands=[],
    )


# PUBLIC_INTERFACE
def genre_list_item(row: Any) -> GenreListItem:
    return GenreListItem(
        id=row.id,
        name=row.name,
        slug=row.slug,
        description=row.description,
        show_count=int(row.show_count or 0),
    )


def search_show(row: Any) -> SearchShow:
    return SearchShow(id=row.id, title=row.title, date=row.date, venue_name=row.venue_name)


def search_band(row: Any) -> SearchBand:
    return SearchBand(id=row.id, name=row.name, slug=row.slug)


def search_venue(row: Any) -> SearchVenue:
    return SearchVenue(id=row.id, name=row.name, slug=row.slug)
