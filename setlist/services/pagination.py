"""
Pagination resolver shared by every paginated list endpoint.

Exposes:
- Pagination: validated page/per_page with the derived offset
- resolve_pagination: parse raw query strings, rejecting bad values
- parse_limit: parse a clamped `limit` (similar bands, search)
- total_pages / build_meta: pagination metadata for the envelope
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from setlist.core.errors import InvalidParameter
from setlist.schemas.common import PageMeta

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 100
# keeps the offset inside a 64-bit integer for any allowed per_page
MAX_PAGE = 2**31 - 1


@dataclass(frozen=True)
class Pagination:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def _positive_int(raw: Optional[str], param: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    # digits only: "+1", " 1" and "1.0" are all rejected
    if not raw.isascii() or not raw.isdigit() or int(raw) < 1:
        raise InvalidParameter(param, "must be a positive integer")
    return int(raw)


# PUBLIC_INTERFACE
def resolve_pagination(page: Optional[str], per_page: Optional[str]) -> Pagination:
    """Validate `page` and `per_page`; per_page above the maximum is rejected, not clamped."""
    resolved_page = _positive_int(page, "page", DEFAULT_PAGE)
    if resolved_page > MAX_PAGE:
        raise InvalidParameter("page", f"cannot exceed {MAX_PAGE}")
    resolved_per_page = _positive_int(per_page, "per_page", DEFAULT_PER_PAGE)
    if resolved_per_page > MAX_PER_PAGE:
        raise InvalidParameter("per_page", f"cannot exceed {MAX_PER_PAGE}")
    return Pagination(page=resolved_page, per_page=resolved_per_page)


# PUBLIC_INTERFACE
def parse_limit(raw: Optional[str], default: int, maximum: int) -> int:
    """Parse `limit`: invalid values are rejected, values above `maximum` are clamped."""
    return min(_positive_int(raw, "limit", default), maximum)


# PUBLIC_INTERFACE
def total_pages(total: int, per_page: int) -> int:
    if per_page <= 0:
        return 0
    return math.ceil(total / per_page)


# PUBLIC_INTERFACE
def build_meta(pagination: Pagination, total: int) -> PageMeta:
    return PageMeta(
        page=pagination.page,
        per_page=pagination.per_page,
        total=total,
        total_pages=total_pages(total, pagination.per_page),
    )
