"""
SQLAlchemy ORM models for the Setlist API service.

This module defines core database tables:
- venues
- genres
- bands
- band_genres (association)
- shows
- show_bands (association carrying headliner flag and running order)

All timestamps are stored in UTC and handed back timezone-aware, whatever the
backing dialect (PostgreSQL in production, SQLite in tests).
"""

from __future__ import annotations

from datetime import datetime, time, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator

AGE_RESTRICTIONS = ("All Ages", "18+", "21+")
SHOW_SOURCES = ("manual", "band_submitted")

# Integer primary keys are 32-bit on every backing dialect
MIN_ID = -(2**31)
MAX_ID = 2**31 - 1


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp normalized to UTC on the way in and out."""

    impl = TIMESTAMP(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            # SQLite stores text; keep every value in the same naive UTC form so comparisons hold
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""

    pass


band_genres = Table(
    "band_genres",
    Base.metadata,
    Column("band_id", ForeignKey("bands.id", ondelete="CASCADE"), primary_key=True),
    Column("genre_id", ForeignKey("genres.id", ondelete="CASCADE"), primary_key=True),
)


# VENUES
class Venue(Base):
    """A place that hosts shows."""

    __tablename__ = "venues"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, server_default=func.now())

    shows: Mapped[List["Show"]] = relationship(back_populates="venue")

    __table_args__ = (
        Index("ix_venues_region", "region"),
        CheckConstraint("capacity IS NULL OR capacity >= 0", name="ck_venues_capacity_nonnegative"),
    )


# GENRES
class Genre(Base):
    """Musical genre used to tag bands."""

    __tablename__ = "genres"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    bands: Mapped[List["Band"]] = relationship(secondary=band_genres, back_populates="genres")


# BANDS
class Band(Base):
    """A performing act. Names are kept unique by the submission find-or-create."""

    __tablename__ = "bands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hometown: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    spotify_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    instagram: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    facebook: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bandcamp_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, server_default=func.now())

    genres: Mapped[List["Genre"]] = relationship(secondary=band_genres, back_populates="bands")
    appearances: Mapped[List["ShowBand"]] = relationship(back_populates="band")


# SHOWS
class Show(Base):
    """A dated event at a venue."""

    __tablename__ = "shows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    venue_id: Mapped[int] = mapped_column(ForeignKey("venues.id", ondelete="RESTRICT"), nullable=False, index=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    doors_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    show_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    price_min: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    price_max: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    ticket_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    age_restriction: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status: Mapped[str] = mapped_column(String(40), nullable=False, default="scheduled", server_default="scheduled")
    source: Mapped[str] = mapped_column(String(40), nullable=False, default="manual", server_default="manual")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    venue: Mapped["Venue"] = relationship(back_populates="shows")
    lineup: Mapped[List["ShowBand"]] = relationship(back_populates="show", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_shows_date", "date"),
        CheckConstraint("price_min IS NULL OR price_min >= 0", name="ck_shows_price_min_nonnegative"),
        CheckConstraint("price_max IS NULL OR price_max >= 0", name="ck_shows_price_max_nonnegative"),
        CheckConstraint(
            "age_restriction IS NULL OR age_restriction IN ('All Ages', '18+', '21+')",
            name="ck_shows_age_restriction",
        ),
        CheckConstraint("source IN ('manual', 'band_submitted')", name="ck_shows_source"),
    )


# SHOW_BANDS association
class ShowBand(Base):
    """A band's appearance on a show, with headliner flag and running order."""

    __tablename__ = "show_bands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    show_id: Mapped[int] = mapped_column(ForeignKey("shows.id", ondelete="CASCADE"), nullable=False, index=True)
    band_id: Mapped[int] = mapped_column(ForeignKey("bands.id", ondelete="CASCADE"), nullable=False, index=True)
    is_headliner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    performance_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    show: Mapped["Show"] = relationship(back_populates="lineup")
    band: Mapped["Band"] = relationship(back_populates="appearances")

    __table_args__ = (
        UniqueConstraint("show_id", "band_id", name="uq_show_bands_show_band"),
        Index("ix_show_bands_show_order", "show_id", "performance_order"),
    )
