"""
Pydantic schemas for global search results. Results are intentionally shallow.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SearchShow(BaseModel):
    id: int
    title: Optional[str] = None
    date: datetime
    venue_name: str


class SearchBand(BaseModel):
    id: int
    name: str
    slug: str


class SearchVenue(BaseModel):
    id: int
    name: str
    slug: str


class SearchResults(BaseModel):
    shows: List[SearchShow] = Field(default_factory=list)
    bands: List[SearchBand] = Field(default_factory=list)
    venues: List[SearchVenue] = Field(default_factory=list)


class SearchResponse(BaseModel):
    data: SearchResults
