"""
Date and time handling in the configured local timezone.

Exposes:
- local_timezone: the LOCAL_TIMEZONE zone, or a fixed UTC-5 "EST" when the zone is unavailable
- today_window / weekend_window: local date windows for the tonight and this-weekend filters
- parse_date_range: date_from/date_to query parameters
- parse_show_date / parse_time_of_day: submission body fields
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from setlist.core.config import get_settings
from setlist.core.errors import InvalidParameter
from setlist.core.logging import get_logger

logger = get_logger("setlist.dates")

EST = timezone(timedelta(hours=-5), "EST")
SUBMISSION_DEFAULT_TIME = time(20, 0)
DATE_RANGE_PARAM = "date_from/date_to"

_DATE_ONLY = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_FORMATS = ("%H:%M:%S", "%H:%M")

Window = Tuple[datetime, datetime]


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("timezone data unavailable, using fixed UTC-5", extra={"timezone": name})
        return EST


# PUBLIC_INTERFACE
def local_timezone() -> tzinfo:
    return _zone(get_settings().LOCAL_TIMEZONE)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _day_bounds(day: date, tz: tzinfo) -> Window:
    return datetime.combine(day, time.min, tzinfo=tz), datetime.combine(day, time.max, tzinfo=tz)


# PUBLIC_INTERFACE
def today_window(now: Optional[datetime] = None) -> Window:
    """Local start of today through the last microsecond of today."""
    tz = local_timezone()
    today = (now or utcnow()).astimezone(tz).date()
    return _day_bounds(today, tz)


# PUBLIC_INTERFACE
def weekend_window(now: Optional[datetime] = None) -> Window:
    """Friday 00:00 through Sunday 23:59:59.999999 local.

    Monday to Thursday look ahead to the coming Friday. On Saturday and Sunday
    the window starts at the beginning of today.
    """
    tz = local_timezone()
    today = (now or utcnow()).astimezone(tz).date()
    weekday = today.weekday()
    if weekday >= 5:
        start_day = today
    else:
        start_day = today + timedelta(days=4 - weekday)
    sunday = today + timedelta(days=6 - weekday)
    start, _ = _day_bounds(start_day, tz)
    _, end = _day_bounds(sunday, tz)
    return start, end


def _parse_timestamp(raw: str, tz: tzinfo) -> datetime:
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _parse_bound(raw: str, tz: tzinfo, end_of_day: bool) -> datetime:
    value = raw.strip()
    if _DATE_ONLY.fullmatch(value):
        day = date.fromisoformat(value)
        return datetime.combine(day, time(23, 59, 59) if end_of_day else time.min, tzinfo=tz)
    return _parse_timestamp(value, tz)


def _one_year_after(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        # Feb 29
        return moment.replace(year=moment.year + 1, day=28)


# PUBLIC_INTERFACE
def parse_date_range(
    date_from: Optional[str], date_to: Optional[str], now: Optional[datetime] = None
) -> Window:
    """Parse the date_from/date_to pair.

    Each side accepts YYYY-MM-DD or an ISO 8601 timestamp. A bare date_from is
    local midnight, a bare date_to is 23:59:59 local that day. Missing sides
    default to now and one year from now.
    """
    tz = local_timezone()
    now = now or utcnow()
    try:
        start = _parse_bound(date_from, tz, end_of_day=False) if date_from else now
        end = _parse_bound(date_to, tz, end_of_day=True) if date_to else _one_year_after(now)
    except ValueError:
        raise InvalidParameter(DATE_RANGE_PARAM, "invalid date format, use ISO 8601")
    return start, end


# PUBLIC_INTERFACE
def parse_show_date(raw: str) -> datetime:
    """Submission date: RFC 3339 timestamp, or YYYY-MM-DD meaning 8:00 PM local.

    Raises ValueError when the value is neither.
    """
    tz = local_timezone()
    value = raw.strip()
    if _DATE_ONLY.fullmatch(value):
        return datetime.combine(date.fromisoformat(value), SUBMISSION_DEFAULT_TIME, tzinfo=tz)
    return _parse_timestamp(value, tz)


# PUBLIC_INTERFACE
def parse_time_of_day(raw: Optional[str]) -> Optional[time]:
    """HH:MM or HH:MM:SS; anything else is treated as absent."""
    if not raw:
        return None
    for fmt in _TIME_FORMATS:
        try:
            return datetime.strptime(raw.strip(), fmt).time()
        except ValueError:
            continue
    return None
