"""
Pydantic schemas for shows: list items, detail, and submission payloads.
"""

from __future__ import annotations

from datetime import datetime, time
from typing import List, Optional

from pydantic import BaseModel, Field

from setlist.db.models import MAX_ID, MIN_ID
from setlist.schemas.common import PageMeta
from setlist.schemas.genres import GenreBasic


class VenueBasic(BaseModel):
    id: int
    name: str
    slug: str
    region: Optional[str] = None
    address: Optional[str] = None
    image_url: Optional[str] = None


class BandBasic(BaseModel):
    id: int
    name: str
    slug: str
    image_url: Optional[str] = None
    is_headliner: bool = False
    performance_order: int = 0


class ShowListItem(BaseModel):
    id: int
    title: Optional[str] = None
    image_url: Optional[str] = None
    date: datetime
    doors_time: Optional[time] = None
    show_time: Optional[time] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    ticket_url: Optional[str] = None
    age_restriction: Optional[str] = None
    status: str
    venue: VenueBasic
    bands: List[BandBasic] = Field(default_factory=list)


class ShowListResponse(BaseModel):
    data: List[ShowListItem]
    meta: PageMeta


class VenueForShow(BaseModel):
    id: int
    name: str
    slug: str
    address: Optional[str] = None
    region: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None


class BandForShow(BaseModel):
    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    image_url: Optional[str] = None
    spotify_url: Optional[str] = None
    website: Optional[str] = None
    is_headliner: bool = False
    performance_order: int = 0
    genres: List[GenreBasic] = Field(default_factory=list)


class ShowDetail(BaseModel):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    date: datetime
    doors_time: Optional[time] = None
    show_time: Optional[time] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    ticket_url: Optional[str] = None
    age_restriction: Optional[str] = None
    status: str
    venue: VenueForShow
    bands: List[BandForShow] = Field(default_factory=list)


class ShowDetailResponse(BaseModel):
    data: ShowDetail


# Submission

class SubmittedBand(BaseModel):
    name: str = Field(..., description="Band name; matched exactly (after trimming) against existing bands")
    is_headliner: Optional[bool] = Field(None, description="Defaults to false")
    performance_order: Optional[int] = Field(None, ge=MIN_ID, le=MAX_ID, description="Defaults to 0")


class CreateShowRequest(BaseModel):
    """Body of POST /api/shows. Business rules are checked by the submission service."""

    venue_id: int = Field(..., ge=MIN_ID, le=MAX_ID, description="Existing venue id")
    date: str = Field(..., description="RFC 3339 timestamp, or YYYY-MM-DD for 8:00 PM local time")
    image_url: Optional[str] = None
    doors_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS; ignored when unparseable")
    show_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS; ignored when unparseable")
    price_min: Optional[float] = Field(None, allow_inf_nan=False)
    price_max: Optional[float] = Field(None, allow_inf_nan=False)
    ticket_url: Optional[str] = None
    age_restriction: Optional[str] = Field(None, description="One of: All Ages, 18+, 21+")
    bands: List[SubmittedBand] = Field(..., min_length=1)


class CreateShowResult(BaseModel):
    id: int
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class CreateShowResponse(BaseModel):
    data: CreateShowResult
