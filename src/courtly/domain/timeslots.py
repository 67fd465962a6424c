"""Wall-clock time arithmetic on minutes since midnight.

Times arrive as "HH:MM" strings (API) or datetime.time (psycopg2 rows).
Everything downstream works on integer minutes so that 10:45 is 645,
never 10.45.

Intervals are half-open: [start, end). Two intervals overlap iff
    a.start < b.end AND b.start < a.end
so a booking ending at 11:00 never collides with one starting at 11:00.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from decimal import Decimal, InvalidOperation

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class Interval:
    """Half-open interval [start, end) in minutes since midnight."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end > MINUTES_PER_DAY:
            raise ValueError(f"Interval [{self.start}, {self.end}) is outside the day")
        if self.end <= self.start:
            raise ValueError(f"Interval [{self.start}, {self.end}) is empty")

    @classmethod
    def from_start(cls, start: int, duration_minutes: int) -> Interval:
        return cls(start, start + duration_minutes)

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, other: Interval) -> bool:
        return self.start <= other.start and other.end <= self.end


def intervals_overlap(a: Interval, b: Interval) -> bool:
    """Half-open overlap test. Symmetric in its arguments."""
    return a.start < b.end and b.start < a.end


def parse_time(value: str | time) -> int:
    """Convert "HH:MM", "HH:MM:SS" or a datetime.time to minutes since midnight.

    "24:00" is accepted as the end of the day (1440). Seconds must be zero;
    bookings never start mid-minute.

    Raises:
        ValueError: On malformed or out-of-range input.
    """
    if isinstance(value, time):
        if value.second or value.microsecond:
            raise ValueError(f"Time {value.isoformat()} has a non-zero seconds part")
        return value.hour * 60 + value.minute

    if not isinstance(value, str):
        raise ValueError(f"Unsupported time value: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)")

    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 else 0
    if seconds:
        raise ValueError(f"Time {value!r} has a non-zero seconds part")
    if minutes > 59:
        raise ValueError(f"Invalid minutes in {value!r}")

    total = hours * 60 + minutes
    if total > MINUTES_PER_DAY:
        raise ValueError(f"Time {value!r} is past the end of the day")
    return total


def format_time(minutes: int) -> str:
    """Render minutes since midnight as zero-padded "HH:MM"."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hours_to_minutes(duration_hours: int | float | str | Decimal) -> int:
    """Convert a duration in (possibly fractional) hours to whole minutes.

    Floats go through str() so 1.5 becomes exactly 90, not 89.99...

    Raises:
        ValueError: If the duration is not a whole number of minutes.
    """
    try:
        hours = Decimal(str(duration_hours))
    except InvalidOperation:
        raise ValueError(f"Invalid duration: {duration_hours!r}")
    if not hours.is_finite():
        raise ValueError(f"Invalid duration: {duration_hours!r}")

    minutes = hours * 60
    if minutes != minutes.to_integral_value():
        raise ValueError(f"Duration {duration_hours!r}h is not a whole number of minutes")
    return int(minutes)
