"""Time utilities for consistent timestamp handling.

Venue schedules are stored as wall-clock values. A venue's IANA timezone is
only used to decide which calendar day is "today" at the venue.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return current UTC timestamp (timezone-aware)."""
    return datetime.now(timezone.utc)


def resolve_timezone(tz_name: str) -> ZoneInfo:
    """Return the ZoneInfo for *tz_name*.

    Raises:
        ValueError: If the name is not a known IANA timezone.
    """
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name!r}")


def venue_today(tz_name: str, now: datetime | None = None) -> date:
    """Return the current calendar date at a venue located in *tz_name*."""
    current = now if now is not None else utc_now()
    return current.astimezone(resolve_timezone(tz_name)).date()
