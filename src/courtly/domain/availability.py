"""Slot generation - which fixed-length slots of a day can still be booked.

generate_slots() is pure: given one day's opening hours, that day's blocked
dates and its existing bookings it lays fixed-size slots over
[open_time, close_time) and marks each one free or taken. A slot is only
offered if it fits completely before closing time.

A day yields no slots at all when the venue has no hours row for that
weekday, the row is marked closed, or the date is blocked.

get_venue_slots() loads those inputs for one venue/date and delegates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import BlockedDate, BookedInterval, OperatingHours
from courtly.domain.timeslots import MINUTES_PER_DAY, Interval, format_time, intervals_overlap
from courtly.domain.venues import load_venue
from courtly.infra.db import txn
from courtly.infra.repositories.bookings_repository import list_active_bookings
from courtly.infra.repositories.schedule_repository import (
    get_operating_hours,
    list_blocked_dates,
)
from courtly.infra.settings import get_settings


@dataclass(frozen=True)
class Slot:
    start_time: int
    duration_minutes: int
    available: bool

    @property
    def interval(self) -> Interval:
        return Interval.from_start(self.start_time, self.duration_minutes)

    def as_dict(self) -> dict:
        return {
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.start_time + self.duration_minutes),
            "available": self.available,
        }


def day_of_week(d: date) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6 (stored hours use this)."""
    return (d.weekday() + 1) % 7


def validate_slot_minutes(slot_minutes: int) -> None:
    if isinstance(slot_minutes, bool) or not isinstance(slot_minutes, int):
        raise ValueError(f"slot_minutes must be an integer, got {slot_minutes!r}")
    if not 0 < slot_minutes <= MINUTES_PER_DAY:
        raise ValueError("slot_minutes must be between 1 and 1440")


def is_day_closed(
    target_date: date,
    operating_hours: OperatingHours | None,
    blocked_dates: Iterable[BlockedDate],
) -> bool:
    """True if nothing can be booked on *target_date* at all."""
    if operating_hours is None or operating_hours.is_closed:
        return True
    return any(b.blocked_date == target_date for b in blocked_dates)


def generate_slots(
    target_date: date,
    operating_hours: OperatingHours | None,
    blocked_dates: Iterable[BlockedDate],
    bookings: Iterable[BookedInterval],
    slot_minutes: int = 60,
) -> list[Slot]:
    """Lay fixed-size slots over one day's opening hours.

    Args:
        target_date: The calendar date (venue-local).
        operating_hours: Hours row for target_date's weekday, or None.
        blocked_dates: Blocked dates of the venue; only rows equal to
            target_date matter.
        bookings: Existing bookings on target_date. Cancelled rows are ignored.
        slot_minutes: Slot length in minutes.

    Returns:
        Slots ordered by start time; empty if the venue is closed that day.

    Raises:
        ValueError: If slot_minutes is invalid or the hours row belongs to a
            different weekday than target_date.
    """
    validate_slot_minutes(slot_minutes)

    blocked = list(blocked_dates)
    if is_day_closed(target_date, operating_hours, blocked):
        return []

    if operating_hours.day_of_week != day_of_week(target_date):
        raise ValueError(
            f"Hours for weekday {operating_hours.day_of_week} passed for "
            f"{target_date.isoformat()} (weekday {day_of_week(target_date)})"
        )

    busy = [b.interval for b in bookings if b.is_blocking]

    slots: list[Slot] = []
    start = operating_hours.open_time
    while start + slot_minutes <= operating_hours.close_time:
        candidate = Interval.from_start(start, slot_minutes)
        taken = any(intervals_overlap(candidate, other) for other in busy)
        slots.append(Slot(start_time=start, duration_minutes=slot_minutes, available=not taken))
        start += slot_minutes

    return slots


def get_venue_slots(
    venue_id: str,
    target_date: date,
    *,
    slot_minutes: int | None = None,
    cur: PgCursor | None = None,
) -> list[Slot]:
    """Compute the slots of one venue on one date.

    Args:
        venue_id: Venue UUID.
        target_date: Calendar date (venue-local).
        slot_minutes: Slot length; defaults to COURTLY_SLOT_MINUTES.
        cur: Optional cursor to run inside the caller's transaction.

    Returns:
        Slots as produced by generate_slots().

    Raises:
        VenueNotFound: If the venue doesn't exist.
    """
    if slot_minutes is None:
        slot_minutes = get_settings().slot_minutes
    validate_slot_minutes(slot_minutes)

    def _do(c: PgCursor) -> list[Slot]:
        load_venue(c, venue_id)
        hours = get_operating_hours(c, venue_id=venue_id, day_of_week=day_of_week(target_date))
        blocked = list_blocked_dates(c, venue_id=venue_id, on=target_date)
        if is_day_closed(target_date, hours, blocked):
            return []
        bookings = list_active_bookings(c, venue_id=venue_id, booking_date=target_date)
        return generate_slots(target_date, hours, blocked, bookings, slot_minutes)

    if cur is not None:
        return _do(cur)
    with txn() as c:
        return _do(c)
