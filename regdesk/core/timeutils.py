"""Datetime helpers.

Timestamps are persisted as naive UTC values. Day boundaries used by the
statistics endpoints are computed in the zone configured under
``stats.timezone`` and converted back to UTC before querying.
"""

from __future__ import annotations

import logging
import zoneinfo
from datetime import datetime, timezone, tzinfo

logger = logging.getLogger(__name__)


def resolve_timezone(name: str) -> tzinfo:
    """Return the zone called ``name``; invalid names fall back to UTC."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return zoneinfo.ZoneInfo(name)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone %r, falling back to UTC", name)
        return timezone.utc


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (storage representation)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(tz: tzinfo, now: datetime | None = None) -> datetime:
    """Midnight of the current day in ``tz``, as an aware datetime."""
    current = now.astimezone(tz) if now is not None else datetime.now(tz)
    return current.replace(hour=0, minute=0, second=0, microsecond=0)


def local_date(tz: tzinfo, now: datetime | None = None) -> str:
    """``YYYY-MM-DD`` for the current day in ``tz``."""
    return start_of_day(tz, now).date().isoformat()


__all__ = ["local_date", "resolve_timezone", "start_of_day", "to_storage", "utcnow"]
