"""
Pydantic schemas for genres.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class GenreBasic(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class GenreListItem(GenreBasic):
    description: Optional[str] = None
    show_count: int = 0


class GenreListResponse(BaseModel):
    data: List[GenreListItem]
