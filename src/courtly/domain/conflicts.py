"""Booking conflict detection.

Centralised logic to decide whether a proposed booking collides with a
venue's existing bookings on the same date.

Overlap formula:  (new_start < existing_end) AND (existing_start < new_end)
Strict inequality lets one booking end exactly when the next begins.

Only non-cancelled bookings generate conflicts.

A conflict with a booking that starts at the very same minute is reported as
SLOT_TAKEN (somebody got that slot first); anything else is OVERLAP (the
proposal runs into a longer or offset booking). Callers use the distinction
for user-facing messages only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from courtly.domain.models import BookedInterval
from courtly.domain.timeslots import Interval, format_time, intervals_overlap

logger = logging.getLogger(__name__)


class ConflictKind(str, Enum):
    SLOT_TAKEN = "slot_taken"
    OVERLAP = "overlap"


@dataclass(frozen=True)
class Conflict:
    booking_id: str
    kind: ConflictKind
    existing: Interval


def find_conflict(
    proposed: Interval,
    existing: Iterable[BookedInterval],
    *,
    venue_id: str | None = None,
) -> Conflict | None:
    """Return the earliest existing booking that overlaps *proposed*, if any.

    Args:
        proposed: Requested [start, end) interval.
        existing: Bookings on the same venue and date. Cancelled rows are skipped.
        venue_id: Optional venue ID (for logging context).

    Returns:
        Conflict describing the first clash, or None if the interval is free.
    """
    candidates = sorted(
        (b for b in existing if b.is_blocking),
        key=lambda b: (b.start_time, b.id),
    )

    for booking in candidates:
        other = booking.interval
        if not intervals_overlap(proposed, other):
            continue

        kind = ConflictKind.SLOT_TAKEN if other.start == proposed.start else ConflictKind.OVERLAP
        logger.warning(
            "booking conflict detected",
            extra={
                "extra_fields": {
                    "venue_id": venue_id,
                    "requested_start": format_time(proposed.start),
                    "requested_end": format_time(proposed.end),
                    "conflicting_booking_id": booking.id,
                    "existing_start": format_time(other.start),
                    "existing_end": format_time(other.end),
                    "kind": kind.value,
                },
            },
        )
        return Conflict(booking_id=booking.id, kind=kind, existing=other)

    return None
