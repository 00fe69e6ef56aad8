"""
Band show submission.

Validation runs in a fixed order and stops at the first failure. Once the
show is stored, each submitted band is found by exact name or created, then
linked to the show. Every write is committed on its own: a band that cannot
be created or linked is logged and skipped, and the submission still succeeds.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from setlist.core.errors import NotFound, ValidationFailed, persistence_errors
from setlist.core.logging import get_logger
from setlist.db.models import AGE_RESTRICTIONS, Band, Show
from setlist.db.queries import Queries
from setlist.schemas.shows import CreateShowRequest, CreateShowResult, SubmittedBand
from setlist.services.dates import parse_show_date, parse_time_of_day, utcnow

logger = get_logger("setlist.submissions")

SUBMITTED_STATUS = "scheduled"
SUBMITTED_SOURCE = "band_submitted"
FALLBACK_SLUG = "band"


# PUBLIC_INTERFACE
def generate_slug(name: str) -> str:
    """Lowercase, whitespace to hyphens, drop anything outside [a-z0-9-], collapse and trim hyphens."""
    slug = re.sub(r"\s", "-", name.lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or FALLBACK_SLUG


def _decimal(value: Optional[float]) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


def _validate(request: CreateShowRequest) -> datetime:
    try:
        show_date = parse_show_date(request.date)
    except ValueError:
        raise ValidationFailed("Invalid date format", {"date": "must be valid ISO 8601 date"})
    if show_date < utcnow():
        raise ValidationFailed("Invalid date", {"date": "must be a future date"})

    for field in ("price_min", "price_max"):
        value = getattr(request, field)
        if value is not None and value < 0:
            raise ValidationFailed("Invalid price", {field: "must be >= 0"})
    if request.price_min is not None and request.price_max is not None and request.price_max < request.price_min:
        raise ValidationFailed("Invalid price range", {"price_max": "must be >= price_min"})

    if request.age_restriction is not None and request.age_restriction not in AGE_RESTRICTIONS:
        raise ValidationFailed(
            "Invalid age restriction",
            {"age_restriction": f"must be one of: {', '.join(AGE_RESTRICTIONS)}"},
        )

    for index, band in enumerate(request.bands):
        if not band.name.strip():
            raise ValidationFailed("Invalid band", {"bands": {"index": index, "name": "must not be empty"}})
    return show_date


def _find_or_create_band(queries: Queries, name: str) -> Band:
    band = queries.get_band_by_name(name)
    if band is None:
        band = queries.create_band(name=name, slug=generate_slug(name))
        logger.info("created band from submission", extra={"band_id": band.id, "band_name": name})
    return band


def _link_band(queries: Queries, show: Show, submitted: SubmittedBand) -> None:
    name = submitted.name.strip()
    try:
        band = _find_or_create_band(queries, name)
    except SQLAlchemyError as exc:
        logger.error("failed to create band", extra={"band_name": name, "error": str(exc)})
        queries.reset()
        return
    try:
        queries.create_show_band(
            show_id=show.id,
            band_id=band.id,
            is_headliner=bool(submitted.is_headliner),
            performance_order=submitted.performance_order or 0,
        )
    except SQLAlchemyError as exc:
        logger.error(
            "failed to link band to show",
            extra={"show_id": show.id, "band_id": band.id, "error": str(exc)},
        )
        queries.reset()


# PUBLIC_INTERFACE
def create_show(queries: Queries, request: CreateShowRequest) -> CreateShowResult:
    """Validate a submission, store the show and link its bands."""
    with persistence_errors("check venue exists", venue_id=request.venue_id):
        venue_found = queries.venue_exists(request.venue_id)
    if not venue_found:
        raise NotFound("Venue")

    show_date = _validate(request)

    with persistence_errors("create show", venue_id=request.venue_id):
        show = queries.create_show(
            venue_id=request.venue_id,
            title=None,
            image_url=request.image_url,
            date=show_date,
            doors_time=parse_time_of_day(request.doors_time),
            show_time=parse_time_of_day(request.show_time),
            price_min=_decimal(request.price_min),
            price_max=_decimal(request.price_max),
            ticket_url=request.ticket_url,
            age_restriction=request.age_restriction,
            status=SUBMITTED_STATUS,
            source=SUBMITTED_SOURCE,
        )

    for submitted in request.bands:
        _link_band(queries, show, submitted)

    logger.info("show submitted", extra={"show_id": show.id, "venue_id": request.venue_id})
    return CreateShowResult(id=show.id, status=show.status, created_at=show.created_at)
