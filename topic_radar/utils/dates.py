"""Calendar-day helpers. Dates are ``YYYY-MM-DD`` strings throughout."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from topic_radar.utils.logger import get_logger

logger = get_logger()


def local_today(tz_name: str = "Australia/Sydney") -> str:
    """Current calendar date in ``tz_name``.

    Only the CLI calls this; the scoring code always receives ``today`` explicitly.
    """
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %s, using UTC", tz_name)
        tz = timezone.utc
    return datetime.now(tz).date().isoformat()


def parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def date_offset(day: str, delta_days: int) -> str:
    """Shift a ``YYYY-MM-DD`` string by whole days; ``""`` if it does not parse."""
    parsed = parse_day(day)
    if parsed is None:
        return ""
    return (parsed + timedelta(days=delta_days)).isoformat()


def days_between(start: str, end: str) -> int:
    """Inclusive day count from ``start`` to ``end``, never below 1.

    Unparseable input counts as a single day.
    """
    a = parse_day(start)
    b = parse_day(end)
    if a is None or b is None:
        return 1
    return max(1, (b - a).days + 1)
