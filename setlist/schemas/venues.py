"""
Pydantic schemas for venues.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from setlist.schemas.shows import BandBasic


class VenueListItem(BaseModel):
    id: int
    name: str
    slug: str
    address: Optional[str] = None
    region: Optional[str] = None
    capacity: Optional[int] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    upcoming_show_count: int = 0


class VenueListResponse(BaseModel):
    data: List[VenueListItem]


class VenueUpcomingShow(BaseModel):
    id: int
    title: Optional[str] = None
    date: datetime
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    bands: List[BandBasic] = Field(default_factory=list)


class VenueDetail(BaseModel):
    id: int
    name: str
    slug: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    region: Optional[str] = None
    capacity: Optional[int] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    image_url: Optional[str] = None
    upcoming_shows: List[VenueUpcomingShow] = Field(default_factory=list)

    class Config:
        from_attributes = True


class VenueDetailResponse(BaseModel):
    data: VenueDetail
