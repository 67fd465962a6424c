"""Booking admission - transactional check-and-insert.

Guarantees at most one admission per overlapping interval:
1. Takes a transaction-scoped advisory lock keyed by (venue_id, date), so
   admissions for the same venue/day run one at a time.
2. Re-reads the day's opening hours, blocked dates and non-cancelled bookings
   under that lock.
3. Runs the pure overlap check (courtly.domain.conflicts).
4. Inserts the booking. The storage-level unique index and exclusion
   constraint are a second layer: if they fire anyway, the request lost a
   race and is rejected as CONCURRENT_CONFLICT.

Outcomes are Admitted or Rejected. Database failures unrelated to overlap
propagate as StorageError and are never turned into a rejection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable

import psycopg2
from psycopg2 import errors as pg_errors
from psycopg2.extensions import cursor as PgCursor

from courtly.domain.availability import day_of_week, is_day_closed
from courtly.domain.conflicts import ConflictKind, find_conflict
from courtly.domain.models import BlockedDate, BookingPayload, OperatingHours
from courtly.domain.timeslots import MINUTES_PER_DAY, Interval, format_time, parse_time
from courtly.domain.venues import load_venue
from courtly.infra.db import StorageError, advisory_xact_lock, txn
from courtly.infra.repositories.bookings_repository import insert_booking, list_active_bookings
from courtly.infra.repositories.schedule_repository import (
    get_operating_hours,
    list_blocked_dates,
)
from courtly.infra.time import venue_today
from courtly.observability.redaction import safe_log_context

logger = logging.getLogger(__name__)

# Durations are offered in half-hour steps
DURATION_STEP_MINUTES = 30


class RejectReason(str, Enum):
    OVERLAP = "overlap"
    CONCURRENT_CONFLICT = "concurrent_conflict"


REJECTION_MESSAGES = {
    RejectReason.OVERLAP: "This time slot overlaps with an existing booking",
    RejectReason.CONCURRENT_CONFLICT: "This time slot was just booked. Please select another time.",
}


@dataclass(frozen=True)
class Admitted:
    booking_id: str


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    conflicting_booking_id: str | None = None

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self.reason]


AdmissionOutcome = Admitted | Rejected


class BookingValidationError(ValueError):
    """Raised when a booking request is malformed (bad duration, past date...)."""

    def __init__(self, reason_code: str, meta: dict | None = None) -> None:
        self.reason_code = reason_code
        self.meta = meta or {}
        super().__init__(f"Invalid booking: {reason_code}")


class OutsideOperatingHours(Exception):
    """Raised when the venue is closed for (part of) the requested interval."""

    def __init__(self, reason_code: str, meta: dict | None = None) -> None:
        self.reason_code = reason_code
        self.meta = meta or {}
        super().__init__(f"Venue not open: {reason_code}")


def build_interval(start_time: str | int, duration_minutes: int) -> Interval:
    """Validate and convert a requested start/duration into an Interval.

    Raises:
        BookingValidationError: On a malformed start time, a duration that is
            not a positive multiple of 30 minutes, or an interval running past
            midnight.
    """
    if isinstance(start_time, int):
        start = start_time
    else:
        try:
            start = parse_time(start_time)
        except ValueError:
            raise BookingValidationError("invalid_start_time", {"start_time": str(start_time)})

    if duration_minutes <= 0 or duration_minutes % DURATION_STEP_MINUTES:
        raise BookingValidationError("invalid_duration", {"duration_minutes": duration_minutes})

    if start < 0 or start + duration_minutes > MINUTES_PER_DAY:
        raise BookingValidationError("crosses_midnight", {"start_time": start})

    return Interval.from_start(start, duration_minutes)


def check_within_opening_hours(
    booking_date: date,
    proposed: Interval,
    operating_hours: OperatingHours | None,
    blocked_dates: Iterable[BlockedDate],
) -> None:
    """Raise OutsideOperatingHours unless *proposed* fits inside the day's hours."""
    if is_day_closed(booking_date, operating_hours, blocked_dates):
        raise OutsideOperatingHours("venue_closed", {"date": booking_date.isoformat()})
    if not operating_hours.interval.contains(proposed):
        raise OutsideOperatingHours(
            "outside_operating_hours",
            {
                "open_time": format_time(operating_hours.open_time),
                "close_time": format_time(operating_hours.close_time),
            },
        )


def _lock_key(venue_id: str, booking_date: date) -> str:
    return f"booking:{venue_id}:{booking_date.isoformat()}"


def admit_booking(
    *,
    venue_id: str,
    booking_date: date,
    start_time: str | int,
    duration_minutes: int,
    payload: BookingPayload,
    today: date | None = None,
    cur: PgCursor | None = None,
) -> AdmissionOutcome:
    """Admit a booking if it overlaps nothing, atomically with the insert.

    Args:
        venue_id: Venue UUID.
        booking_date: Calendar date of the booking (venue-local).
        start_time: "HH:MM" string or minutes since midnight.
        duration_minutes: Length, a positive multiple of 30.
        payload: Customer identity, status, source and price.
        today: Override for the venue's current date (tests).
        cur: Optional cursor to run inside the caller's transaction. The caller
            then owns commit/rollback.

    Returns:
        Admitted(booking_id) or Rejected(reason, conflicting_booking_id).

    Raises:
        BookingValidationError: Malformed request or date in the past.
        OutsideOperatingHours: Venue closed, date blocked, or interval not
            inside opening hours.
        VenueNotFound: Unknown venue.
        StorageError: Any other database failure.
    """
    proposed = build_interval(start_time, duration_minutes)

    def _do(c: PgCursor) -> AdmissionOutcome:
        venue = load_venue(c, venue_id)
        if payload.source == "online" and not venue.is_active:
            raise BookingValidationError("venue_inactive")

        local_today = today if today is not None else venue_today(venue.timezone)
        if booking_date < local_today:
            raise BookingValidationError("date_in_past", {"date": booking_date.isoformat()})

        advisory_xact_lock(c, _lock_key(venue_id, booking_date))

        hours = get_operating_hours(c, venue_id=venue_id, day_of_week=day_of_week(booking_date))
        blocked = list_blocked_dates(c, venue_id=venue_id, on=booking_date)
        check_within_opening_hours(booking_date, proposed, hours, blocked)

        existing = list_active_bookings(c, venue_id=venue_id, booking_date=booking_date)
        conflict = find_conflict(proposed, existing, venue_id=venue_id)
        if conflict is not None:
            reason = (
                RejectReason.CONCURRENT_CONFLICT
                if conflict.kind == ConflictKind.SLOT_TAKEN
                else RejectReason.OVERLAP
            )
            return Rejected(reason=reason, conflicting_booking_id=conflict.booking_id)

        c.execute("SAVEPOINT admit_booking")
        try:
            booking_id = insert_booking(
                c,
                venue_id=venue_id,
                booking_date=booking_date,
                start_time=proposed.start,
                duration_minutes=proposed.duration,
                payload=payload,
            )
        except (pg_errors.UniqueViolation, pg_errors.ExclusionViolation):
            c.execute("ROLLBACK TO SAVEPOINT admit_booking")
            logger.warning(
                "booking insert hit overlap constraint",
                extra={
                    "extra_fields": safe_log_context(
                        venue_id=venue_id,
                        booking_date=booking_date,
                        start_time=format_time(proposed.start),
                    )
                },
            )
            return Rejected(reason=RejectReason.CONCURRENT_CONFLICT)
        c.execute("RELEASE SAVEPOINT admit_booking")
        return Admitted(booking_id=booking_id)

    try:
        if cur is not None:
            outcome = _do(cur)
        else:
            with txn() as c:
                outcome = _do(c)
    except psycopg2.Error as exc:
        raise StorageError("admit_booking", exc) from exc

    # Customer identity never reaches the log
    logger.info(
        "booking admitted" if isinstance(outcome, Admitted) else "booking rejected",
        extra={
            "extra_fields": safe_log_context(
                venue_id=venue_id,
                booking_date=booking_date,
                start_time=format_time(proposed.start),
                duration_minutes=proposed.duration,
                source=payload.source,
                booking_id=outcome.booking_id if isinstance(outcome, Admitted) else None,
                reason=outcome.reason.value if isinstance(outcome, Rejected) else None,
                conflicting_booking_id=(
                    outcome.conflicting_booking_id if isinstance(outcome, Rejected) else None
                ),
            )
        },
    )
    return outcome
