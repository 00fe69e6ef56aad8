"""
Global search across shows, bands and venues.

The three categories are searched independently: a failing category is
logged and comes back empty without affecting the others.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from setlist.core.errors import InvalidParameter, MissingParameter
from setlist.core.logging import get_logger
from setlist.db.queries import Queries
from setlist.schemas.search import SearchResults
from setlist.services.converters import search_band, search_show, search_venue
from setlist.services.pagination import parse_limit

logger = get_logger("setlist.search")

DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 50
MIN_QUERY_LENGTH = 2


# PUBLIC_INTERFACE
def validate_search_params(q: Optional[str], limit: Optional[str]) -> Tuple[str, int]:
    """Return (query, limit) or raise; `q` is checked before `limit`."""
    if not q:
        raise MissingParameter("q")
    query = q.strip()
    if len(query) < MIN_QUERY_LENGTH:
        raise InvalidParameter("q", f"must be at least {MIN_QUERY_LENGTH} characters")
    return query, parse_limit(limit, DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT)


def _category(
    queries: Queries,
    name: str,
    search: Callable[[str, int], List[Any]],
    convert: Callable[[Any], Any],
    query: str,
    limit: int,
) -> List[Any]:
    try:
        return [convert(row) for row in search(query, limit)]
    except SQLAlchemyError as exc:
        logger.error(f"failed to search {name}", extra={"query": query, "error": str(exc)})
        queries.reset()
        return []


# PUBLIC_INTERFACE
def global_search(queries: Queries, query: str, limit: int) -> SearchResults:
    return SearchResults(
        shows=_category(queries, "shows", queries.global_search_shows, search_show, query, limit),
        bands=_category(queries, "bands", queries.global_search_bands, search_band, query, limit),
        venues=_category(queries, "venues", queries.global_search_venues, search_venue, query, limit),
    )
