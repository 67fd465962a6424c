"""Row types shared by the availability, admission and pricing logic.

Times are minutes since midnight (see courtly.domain.timeslots). Money is an
integer amount in the venue currency's smallest unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .timeslots import Interval, format_time

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")

# Statuses that occupy time on the venue's calendar
BLOCKING_STATUSES = ("pending", "confirmed", "completed")

BOOKING_SOURCES = ("online", "manual")


@dataclass(frozen=True)
class Venue:
    id: str
    owner_id: str
    name: str
    price_per_hour: int
    is_active: bool
    timezone: str


@dataclass(frozen=True)
class OperatingHours:
    """Opening hours for one day of the week (0 = Sunday ... 6 = Saturday)."""

    day_of_week: int
    open_time: int
    close_time: int
    is_closed: bool = False

    @property
    def interval(self) -> Interval:
        return Interval(self.open_time, self.close_time)

    def as_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "open_time": format_time(self.open_time),
            "close_time": format_time(self.close_time),
            "is_closed": self.is_closed,
        }


@dataclass(frozen=True)
class BlockedDate:
    id: str
    blocked_date: date
    reason: str | None = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.blocked_date.isoformat(),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class BookedInterval:
    """The scheduling-relevant part of an existing booking."""

    id: str
    start_time: int
    duration_minutes: int
    status: str = "confirmed"

    @property
    def interval(self) -> Interval:
        return Interval.from_start(self.start_time, self.duration_minutes)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES


@dataclass(frozen=True)
class EquipmentItem:
    id: str
    name: str
    price: int
    equipment_type: str = "item"
    is_available: bool = True


@dataclass(frozen=True)
class BookingPayload:
    """Everything about a new booking except where and when it is.

    Online bookings identify the customer by user_id; manual bookings entered
    by an owner carry the customer's contact details instead.
    """

    status: str = "pending"
    source: str = "online"
    total_price: int = 0
    user_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    notes: str | None = None
    created_by_owner_id: str | None = None

    def __post_init__(self) -> None:
        if self.status not in ("pending", "confirmed"):
            raise ValueError(f"New bookings must be pending or confirmed, got {self.status!r}")
        if self.source not in BOOKING_SOURCES:
            raise ValueError(f"Unknown booking source: {self.source!r}")
        if self.total_price < 0:
            raise ValueError("total_price must be >= 0")
        if not self.user_id and not (self.customer_name or "").strip():
            raise ValueError("A booking needs a user_id or a customer_name")
