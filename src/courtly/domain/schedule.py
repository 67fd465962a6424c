"""Owner-side schedule management: weekly opening hours and blocked dates."""

from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import BlockedDate, OperatingHours
from courtly.domain.timeslots import MINUTES_PER_DAY
from courtly.domain.venues import load_venue
from courtly.infra.db import txn
from courtly.infra.repositories.schedule_repository import (
    delete_blocked_date,
    list_blocked_dates,
    list_operating_hours,
    replace_operating_hours,
    upsert_blocked_date,
)
from courtly.observability.redaction import safe_log_context

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 500


class ScheduleValidationError(ValueError):
    def __init__(self, reason_code: str, meta: dict | None = None) -> None:
        self.reason_code = reason_code
        self.meta = meta or {}
        super().__init__(f"Invalid schedule: {reason_code}")


class BlockedDateNotFound(Exception):
    def __init__(self, blocked_date_id: str) -> None:
        self.blocked_date_id = blocked_date_id
        super().__init__(f"Blocked date not found: {blocked_date_id}")


def validate_operating_hours(hours: Sequence[OperatingHours]) -> None:
    """Check a week of opening hours before it replaces the stored one.

    Rules: weekdays 0..6, each at most once; open days need
    0 <= open_time < close_time <= 24:00 (no overnight hours).

    Raises:
        ScheduleValidationError: On the first violated rule.
    """
    seen: set[int] = set()
    for h in hours:
        if not 0 <= h.day_of_week <= 6:
            raise ScheduleValidationError("invalid_day_of_week", {"day_of_week": h.day_of_week})
        if h.day_of_week in seen:
            raise ScheduleValidationError("duplicate_day_of_week", {"day_of_week": h.day_of_week})
        seen.add(h.day_of_week)

        if h.is_closed:
            continue
        if not 0 <= h.open_time < h.close_time <= MINUTES_PER_DAY:
            raise ScheduleValidationError("invalid_hours", {"day_of_week": h.day_of_week})


def save_operating_hours(
    venue_id: str,
    hours: Sequence[OperatingHours],
    *,
    cur: PgCursor | None = None,
) -> list[OperatingHours]:
    """Replace a venue's weekly opening hours in one transaction.

    Returns:
        The stored week, ordered Sunday first.
    """
    validate_operating_hours(hours)
    ordered = sorted(hours, key=lambda h: h.day_of_week)

    def _do(c: PgCursor) -> None:
        replace_operating_hours(c, venue_id=venue_id, hours=ordered)

    if cur is not None:
        _do(cur)
    else:
        with txn() as c:
            _do(c)

    logger.info(
        "operating hours saved",
        extra={
            "extra_fields": safe_log_context(
                venue_id=venue_id,
                open_days=sum(1 for h in ordered if not h.is_closed),
            )
        },
    )
    return ordered


def weekly_schedule(venue_id: str, *, cur: PgCursor | None = None) -> list[OperatingHours]:
    """Raises VenueNotFound for unknown venues."""

    def _do(c: PgCursor) -> list[OperatingHours]:
        load_venue(c, venue_id)
        return list_operating_hours(c, venue_id)

    if cur is not None:
        return _do(cur)
    with txn() as c:
        return _do(c)


def upcoming_blocked_dates(
    venue_id: str,
    *,
    from_date: date | None = None,
    cur: PgCursor | None = None,
) -> list[BlockedDate]:
    """Raises VenueNotFound for unknown venues."""

    def _do(c: PgCursor) -> list[BlockedDate]:
        load_venue(c, venue_id)
        return list_blocked_dates(c, venue_id=venue_id, from_date=from_date)

    if cur is not None:
        return _do(cur)
    with txn() as c:
        return _do(c)


def add_blocked_date(
    venue_id: str,
    blocked_date: date,
    reason: str | None = None,
    *,
    cur: PgCursor | None = None,
) -> BlockedDate:
    """Close a venue for a whole day.

    Blocking an already-blocked date keeps the row; a new non-empty reason
    replaces the old one.
    """
    if reason is not None:
        reason = reason.strip() or None
    if reason is not None and len(reason) > MAX_REASON_LENGTH:
        raise ScheduleValidationError("reason_too_long")

    def _do(c: PgCursor) -> BlockedDate:
        return upsert_blocked_date(c, venue_id=venue_id, blocked_date=blocked_date, reason=reason)

    if cur is not None:
        row = _do(cur)
    else:
        with txn() as c:
            row = _do(c)

    logger.info(
        "date blocked",
        extra={"extra_fields": safe_log_context(venue_id=venue_id, blocked_date=blocked_date)},
    )
    return row


def remove_blocked_date(
    venue_id: str,
    blocked_date_id: str,
    *,
    cur: PgCursor | None = None,
) -> None:
    """Reopen a blocked date.

    Raises:
        BlockedDateNotFound: If the row doesn't exist for this venue.
    """
    if cur is not None:
        deleted = delete_blocked_date(cur, venue_id=venue_id, blocked_date_id=blocked_date_id)
    else:
        with txn() as c:
            deleted = delete_blocked_date(c, venue_id=venue_id, blocked_date_id=blocked_date_id)

    if not deleted:
        raise BlockedDateNotFound(blocked_date_id)
