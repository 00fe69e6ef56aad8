"""
Genre listing.
"""

from __future__ import annotations

from typing import List

from setlist.core.errors import persistence_errors
from setlist.db.queries import Queries
from setlist.schemas.genres import GenreListItem
from setlist.services.converters import genre_list_item


# PUBLIC_INTERFACE
def list_genres(queries: Queries) -> List[GenreListItem]:
    """Every genre ordered by name, with its show count."""
    with persistence_errors("list genres"):
        rows = queries.list_genres_with_show_count()
    return [genre_list_item(row) for row in rows]
