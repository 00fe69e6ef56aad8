"""
Pydantic schemas for bands: list items, detail, and similar bands.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from setlist.schemas.common import PageMeta
from setlist.schemas.genres import GenreBasic
from setlist.schemas.shows import VenueBasic


class BandListItem(BaseModel):
    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    hometown: Optional[str] = None
    image_url: Optional[str] = None
    genres: List[GenreBasic] = Field(default_factory=list)


class BandListResponse(BaseModel):
    data: List[BandListItem]
    meta: PageMeta


class BandUpcomingShow(BaseModel):
    id: int
    date: datetime
    venue: VenueBasic
    is_headliner: bool = False


class BandDetail(BaseModel):
    id: int
    name: str
    slug: str
    bio: Optional[str] = None
    hometown: Optional[str] = None
    image_url: Optional[str] = None
    website: Optional[str] = None
    spotify_url: Optional[str] = None
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    bandcamp_url: Optional[str] = None
    genres: List[GenreBasic] = Field(default_factory=list)
    upcoming_shows: List[BandUpcomingShow] = Field(default_factory=list)


class BandDetailResponse(BaseModel):
    data: BandDetail


class SimilarBandItem(BaseModel):
    id: int
    name: str
    slug: str
    image_url: Optional[str] = None
    shared_genre_count: int
    shared_genres: List[GenreBasic] = Field(default_factory=list)


class SimilarBandsResponse(BaseModel):
    data: List[SimilarBandItem]
