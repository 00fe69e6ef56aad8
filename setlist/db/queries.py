"""
Named queries for the Setlist API.

Queries wraps a SQLAlchemy Session and exposes one method per query the
handlers need. List methods return rows with labelled columns; paginated
lists carry a `total_count` window column repeated on every row. Single
entity lookups return ORM objects. Nothing here catches errors: callers
decide whether a failure is fatal or only degrades the response.

Full-text matching uses PostgreSQL text search when the session is bound to
PostgreSQL and a case-insensitive per-term substring match elsewhere.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from sqlalchemy import and_, desc, distinct, func, or_, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from setlist.db.models import MAX_ID, Band, Genre, Show, ShowBand, Venue, band_genres

TEXT_SEARCH_CONFIG = "english"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _genre_condition(values: Sequence[str]) -> ColumnElement[bool]:
    """Match genres by slug, or by id for purely numeric values."""
    condition = Genre.slug.in_(list(values))
    ids = [int(value) for value in values if value.isascii() and value.isdigit() and int(value) <= MAX_ID]
    if ids:
        condition = or_(condition, Genre.id.in_(ids))
    return condition


def _show_columns() -> tuple:
    return (
        Show.id,
        Show.title,
        Show.image_url,
        Show.date,
        Show.doors_time,
        Show.show_time,
        Show.price_min,
        Show.price_max,
        Show.ticket_url,
        Show.age_restriction,
        Show.status,
        Venue.id.label("venue_id"),
        Venue.name.label("venue_name"),
        Venue.slug.label("venue_slug"),
        Venue.region.label("venue_region"),
        Venue.address.label("venue_address"),
        Venue.image_url.label("venue_image_url"),
    )


def _band_columns() -> tuple:
    return (Band.id, Band.name, Band.slug, Band.bio, Band.hometown, Band.image_url)


def _total_count():
    return func.count().over().label("total_count")


class Queries:
    """Persistence collaborator bound to one request-scoped session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # --------------------------
    # Plumbing
    # --------------------------

    @property
    def is_postgres(self) -> bool:
        return self.db.get_bind().dialect.name == "postgresql"

    def reset(self) -> None:
        """Roll back the current transaction so later queries can run after a failure."""
        self.db.rollback()

    def _rows(self, stmt) -> List[Row]:
        return list(self.db.execute(stmt).all())

    def _count(self, stmt) -> int:
        return int(self.db.execute(stmt).scalar_one())

    def _persist(self, obj: Any) -> Any:
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
            return obj
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def _text_match(self, q: str, *columns, extra=None) -> ColumnElement[bool]:
        """Every whitespace-separated term must appear in one of the columns (or `extra`)."""
        clauses = []
        for term in q.split():
            pattern = _like_pattern(term)
            options = [column.ilike(pattern, escape="\\") for column in columns]
            if extra is not None:
                options.append(extra(pattern))
            clauses.append(or_(*options))
        if not clauses:
            return true()
        return and_(*clauses)

    def _tsvector(self, *columns):
        return func.to_tsvector(TEXT_SEARCH_CONFIG, func.concat_ws(" ", *columns))

    def _tsquery(self, q: str):
        return func.plainto_tsquery(TEXT_SEARCH_CONFIG, q)

    # --------------------------
    # Shows
    # --------------------------

    def _shows(self, *conditions):
        return select(*_show_columns()).join(Venue, Show.venue_id == Venue.id).where(*conditions)

    def _paginated_shows(self, limit: int, offset: int, *conditions) -> List[Row]:
        stmt = (
            self._shows(*conditions)
            .add_columns(_total_count())
            .order_by(Show.date, Show.id)
            .limit(limit)
            .offset(offset)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def list_upcoming_shows(self, limit: int, offset: int) -> List[Row]:
        """Shows on or after now, soonest first."""
        return self._paginated_shows(limit, offset, Show.date >= _utcnow())

    # PUBLIC_INTERFACE
    def list_shows_tonight(self, start: datetime, end: datetime) -> List[Row]:
        """Every show inside today's local window."""
        stmt = self._shows(Show.date.between(start, end)).order_by(Show.date, Show.id)
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def list_shows_this_weekend(self, start: datetime, end: datetime) -> List[Row]:
        """Every show inside the Friday to Sunday window."""
        stmt = self._shows(Show.date.between(start, end)).order_by(Show.date, Show.id)
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def list_free_shows(self, limit: int, offset: int) -> List[Row]:
        """Upcoming shows with no price or a price of zero."""
        return self._paginated_shows(
            limit,
            offset,
            Show.date >= _utcnow(),
            func.coalesce(Show.price_min, 0) == 0,
            func.coalesce(Show.price_max, 0) == 0,
        )

    # PUBLIC_INTERFACE
    def list_shows_by_venue(self, slugs: Sequence[str], limit: int, offset: int) -> List[Row]:
        return self._paginated_shows(limit, offset, Show.date >= _utcnow(), Venue.slug.in_(list(slugs)))

    # PUBLIC_INTERFACE
    def list_shows_by_region(self, regions: Sequence[str], limit: int, offset: int) -> List[Row]:
        return self._paginated_shows(limit, offset, Show.date >= _utcnow(), Venue.region.in_(list(regions)))

    def _show_has_genre(self, values: Sequence[str]) -> ColumnElement[bool]:
        return (
            select(ShowBand.show_id)
            .join(band_genres, band_genres.c.band_id == ShowBand.band_id)
            .join(Genre, Genre.id == band_genres.c.genre_id)
            .where(ShowBand.show_id == Show.id, _genre_condition(values))
            .exists()
        )

    # PUBLIC_INTERFACE
    def list_shows_by_genre(self, values: Sequence[str], limit: int, offset: int) -> List[Row]:
        """Upcoming shows featuring a band tagged with any of the genres. Carries no total."""
        stmt = (
            self._shows(Show.date >= _utcnow(), self._show_has_genre(values))
            .order_by(Show.date, Show.id)
            .limit(limit)
            .offset(offset)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def count_shows_by_genre(self, values: Sequence[str]) -> int:
        stmt = select(func.count(Show.id)).where(Show.date >= _utcnow(), self._show_has_genre(values))
        return self._count(stmt)

    # PUBLIC_INTERFACE
    def list_shows_by_date_range(self, start: datetime, end: datetime, limit: int, offset: int) -> List[Row]:
        return self._paginated_shows(limit, offset, Show.date.between(start, end))

    # PUBLIC_INTERFACE
    def get_show_by_id(self, show_id: int) -> Optional[Row]:
        """One show with its description and the venue website, or None."""
        stmt = self._shows(Show.id == show_id).add_columns(
            Show.description,
            Venue.website.label("venue_website"),
        )
        return self.db.execute(stmt).first()

    def _lineup(self, *conditions):
        return (
            select(
                ShowBand.show_id,
                Band.id,
                Band.name,
                Band.slug,
                Band.bio,
                Band.image_url,
                Band.spotify_url,
                Band.website,
                ShowBand.is_headliner,
                ShowBand.performance_order,
            )
            .join(Band, Band.id == ShowBand.band_id)
            .where(*conditions)
            .order_by(ShowBand.show_id, ShowBand.performance_order, ShowBand.id)
        )

    # PUBLIC_INTERFACE
    def get_show_bands(self, show_id: int) -> List[Row]:
        """The lineup of one show in running order."""
        return self._rows(self._lineup(ShowBand.show_id == show_id))

    # PUBLIC_INTERFACE
    def get_show_bands_batch(self, show_ids: Sequence[int]) -> List[Row]:
        """Lineups for many shows in one round trip, keyed by `show_id`."""
        return self._rows(self._lineup(ShowBand.show_id.in_(list(show_ids))))

    # --------------------------
    # Bands
    # --------------------------

    # PUBLIC_INTERFACE
    def get_band_by_slug(self, slug: str) -> Optional[Band]:
        stmt = select(Band).where(Band.slug == slug).limit(1)
        return self.db.execute(stmt).scalars().first()

    # PUBLIC_INTERFACE
    def get_band_by_name(self, name: str) -> Optional[Band]:
        """Exact name match, oldest band first."""
        stmt = select(Band).where(Band.name == name).order_by(Band.id).limit(1)
        return self.db.execute(stmt).scalars().first()

    # PUBLIC_INTERFACE
    def get_band_genres(self, band_id: int) -> List[Row]:
        stmt = (
            select(Genre.id, Genre.name, Genre.slug)
            .join(band_genres, band_genres.c.genre_id == Genre.id)
            .where(band_genres.c.band_id == band_id)
            .order_by(Genre.name, Genre.id)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def get_band_genres_batch(self, band_ids: Sequence[int]) -> List[Row]:
        """Genres for many bands in one round trip, keyed by `band_id`."""
        stmt = (
            select(band_genres.c.band_id, Genre.id, Genre.name, Genre.slug)
            .select_from(Genre)
            .join(band_genres, band_genres.c.genre_id == Genre.id)
            .where(band_genres.c.band_id.in_(list(band_ids)))
            .order_by(band_genres.c.band_id, Genre.name, Genre.id)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def get_band_upcoming_shows(self, band_id: int) -> List[Row]:
        stmt = (
            select(
                Show.id,
                Show.date,
                Venue.id.label("venue_id"),
                Venue.name.label("venue_name"),
                Venue.slug.label("venue_slug"),
                Venue.region.label("venue_region"),
                Venue.address.label("venue_address"),
                Venue.image_url.label("venue_image_url"),
                ShowBand.is_headliner,
            )
            .select_from(ShowBand)
            .join(Show, Show.id == ShowBand.show_id)
            .join(Venue, Venue.id == Show.venue_id)
            .where(ShowBand.band_id == band_id, Show.date >= _utcnow())
            .order_by(Show.date, Show.id)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def list_bands(self, limit: int, offset: int) -> List[Row]:
        stmt = (
            select(*_band_columns(), _total_count())
            .order_by(Band.name, Band.id)
            .limit(limit)
            .offset(offset)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def search_bands(self, q: str, limit: int, offset: int) -> List[Row]:
        """Full-text band search over name, bio and hometown, best match first."""
        if self.is_postgres:
            vector = self._tsvector(Band.name, Band.bio, Band.hometown)
            query = self._tsquery(q)
            stmt = (
                select(*_band_columns(), _total_count())
                .where(vector.bool_op("@@")(query))
                .order_by(desc(func.ts_rank(vector, query)), Band.name, Band.id)
            )
        else:
            stmt = (
                select(*_band_columns(), _total_count())
                .where(self._text_match(q, Band.name, Band.bio, Band.hometown))
                .order_by(Band.name, Band.id)
            )
        return self._rows(stmt.limit(limit).offset(offset))

    def _band_has_genre(self, values: Sequence[str]) -> ColumnElement[bool]:
        return (
            select(band_genres.c.band_id)
            .join(Genre, Genre.id == band_genres.c.genre_id)
            .where(band_genres.c.band_id == Band.id, _genre_condition(values))
            .exists()
        )

    # PUBLIC_INTERFACE
    def list_bands_by_genre(self, values: Sequence[str], limit: int, offset: int) -> List[Row]:
        """Bands tagged with any of the genres. Carries no total."""
        stmt = (
            select(*_band_columns())
            .where(self._band_has_genre(values))
            .order_by(Band.name, Band.id)
            .limit(limit)
            .offset(offset)
        )
        return self._rows(stmt)

    # PUBLIC_INTERFACE
    def count_bands_by_genre(self, values: Sequence[str]) -> int:
        return self._count(select(func.count(Band.id)).where(self._band_has_genre(values)))

    # PUBLIC_INTERFACE
    def get_similar_bands(self, band_id: int, limit: int) -> List[Row]:
        """Bands sharing at least one genre with `band_id`, most shared genres first."""
        source = band_genres.alias("source_genres")
        candidate = band_genres.alias("candidate_genres")
        shared = func.count(candidate.c.genre_id).label("shared_genre_count")
        stmt = (
            select(Band.id, Band.name, Band.slug, Band.image_url, shared)
            .join(candidate, candidate.c.band_id == Band.id)
            .join(source, and_(source.c.genre_id == candidate.c.genre_id, source.c.band_id == band_id))
            .where(Band.id != band_id)
            .group_by(Band.id, Band.name, Band.slug, Band.image_url)
            .order_by(desc(shared), Band.name, Band.id)
            .limit(limit)
        )
        return self._rows(stmt)

    # --------------------------
    # Venues
    # --------------------------

    def _venues(self, *conditions):
        upcoming = (
            select(func.count(Show.id))
            .where(Show.venue_id == Venue.id, Show.date >= _utcnow())
            .correlate(Venue)
            .scalar_subquery()
        )
        return (
            select(
                Venue.id,
                Venue.name,
                Venue.slug,
                Venue.address,
                Venue.region,
                Venue.capacity,
                Venue.website,
                Venue.image_url,
                upcoming.label("upcoming_show_count"),
            )
            .where(*conditions)
            .order_by(Venue.name, Venue.id)
        )

    # PUBLIC_INTERFACE
    def list_venues_with_show_count(self) -> List[Row]:
        return self._rows(self._venues())

    # PUBLIC_INTERFACE
    def list_venues_by_region(self, regions: Sequence[str]) -> List[Row]:
        return self._rows(self._venues(Venue.region.in_(list(regions))))

    # PUBLIC_INTERFACE
    def get_venue_by_slug(self, slug: str) -> Optional[Venue]:
        stmt = select(Venue).where(Venue.slug == slug).limit(1)
        return self.db.execute(stmt).scalars().first()

    # PUBLIC_INTERFACE
    def venue_exists(self, venue_id: int) -> bool:
        stmt = select(Venue.id).where(Venue.id == venue_id).limit(1)
        return self.db.execute(stmt).first() is not None

    # PUBLIC_INTERFACE
    def get_venue_upcoming_shows(self, venue_id: int, limit: int) -> List[Row]:
        stmt = (
            select(Show.id, Show.title, Show.date, Show.price_min, Show.price_max)
            .where(Show.venue_id == venue_id, Show.date >= _utcnow())
            .order_by(Show.date, Show.id)
            .limit(limit)
        )
        return self._rows(stmt)

    # --------------------------
    # Genres
    # --------------------------

    # PUBLIC_INTERFACE
    def list_genres_with_show_count(self) -> List[Row]:
        """All genres with the number of distinct shows featuring a band tagged with each."""
        show_count = (
            select(func.count(distinct(ShowBand.show_id)))
            .select_from(ShowBand)
            .join(band_genres, band_genres.c.band_id == ShowBand.band_id)
            .where(band_genres.c.genre_id == Genre.id)
            .correlate(Genre)
            .scalar_subquery()
        )
        stmt = select(
            Genre.id,
            Genre.name,
            Genre.slug,
            Genre.description,
            show_count.label("show_count"),
        ).order_by(Genre.name, Genre.id)
        return self._rows(stmt)

    # --------------------------
    # Global search
    # --------------------------

    # PUBLIC_INTERFACE
    def global_search_shows(self, q: str, limit: int) -> List[Row]:
        """Shows matching on title, description, venue name or the name of a band on the bill."""
        stmt = select(Show.id, Show.title, Show.date, Venue.name.label("venue_name")).join(
            Venue, Venue.id == Show.venue_id
        )
        if self.is_postgres:
            vector = self._tsvector(Show.title, Show.description, Venue.name)
            query = self._tsquery(q)
            band_hit = (
                select(ShowBand.show_id)
                .join(Band, Band.id == ShowBand.band_id)
                .where(ShowBand.show_id == Show.id, self._tsvector(Band.name).bool_op("@@")(query))
                .exists()
            )
            stmt = stmt.where(or_(vector.bool_op("@@")(query), band_hit)).order_by(
                desc(func.ts_rank(vector, query)), Show.date, Show.id
            )
        else:

            def band_hit(pattern: str) -> ColumnElement[bool]:
                return (
                    select(ShowBand.show_id)
                    .join(Band, Band.id == ShowBand.band_id)
                    .where(ShowBand.show_id == Show.id, Band.name.ilike(pattern, escape="\\"))
                    .exists()
                )

            stmt = stmt.where(
                self._text_match(q, Show.title, Show.description, Venue.name, extra=band_hit)
            ).order_by(Show.date, Show.id)
        return self._rows(stmt.limit(limit))

    # PUBLIC_INTERFACE
    def global_search_bands(self, q: str, limit: int) -> List[Row]:
        stmt = select(Band.id, Band.name, Band.slug)
        if self.is_postgres:
            vector = self._tsvector(Band.name, Band.bio, Band.hometown)
            query = self._tsquery(q)
            stmt = stmt.where(vector.bool_op("@@")(query)).order_by(
                desc(func.ts_rank(vector, query)), Band.name, Band.id
            )
        else:
            stmt = stmt.where(self._text_match(q, Band.name, Band.bio, Band.hometown)).order_by(
                Band.name, Band.id
            )
        return self._rows(stmt.limit(limit))

    # PUBLIC_INTERFACE
    def global_search_venues(self, q: str, limit: int) -> List[Row]:
        stmt = select(Venue.id, Venue.name, Venue.slug)
        if self.is_postgres:
            vector = self._tsvector(Venue.name, Venue.address, Venue.region)
            query = self._tsquery(q)
            stmt = stmt.where(vector.bool_op("@@")(query)).order_by(
                desc(func.ts_rank(vector, query)), Venue.name, Venue.id
            )
        else:
            stmt = stmt.where(self._text_match(q, Venue.name, Venue.address, Venue.region)).order_by(
                Venue.name, Venue.id
            )
        return self._rows(stmt.limit(limit))

    # --------------------------
    # Writes (each committed on its own)
    # --------------------------

    # PUBLIC_INTERFACE
    def create_show(self, **fields: Any) -> Show:
        return self._persist(Show(**fields))

    # PUBLIC_INTERFACE
    def create_band(self, name: str, slug: str) -> Band:
        return self._persist(Band(name=name, slug=slug))

    # PUBLIC_INTERFACE
    def create_show_band(self, show_id: int, band_id: int, is_headliner: bool, performance_order: int) -> ShowBand:
        return self._persist(
            ShowBand(
                show_id=show_id,
                band_id=band_id,
                is_headliner=is_headliner,
                performance_order=performance_order,
            )
        )
