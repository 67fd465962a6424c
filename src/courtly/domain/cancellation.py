"""Booking cancellation.

Cancelling is a status flip, never a delete. Cancelled bookings stop
blocking their interval, so the slot becomes bookable again right away.
"""

import logging

from psycopg2.extensions import cursor as PgCursor

from courtly.infra.db import txn
from courtly.infra.repositories.bookings_repository import get_booking_status, set_booking_status
from courtly.observability.redaction import safe_log_context

logger = logging.getLogger(__name__)


class BookingNotFound(Exception):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking not found: {booking_id}")


class BookingNotCancellable(Exception):
    """Raised for bookings that already took place."""

    def __init__(self, booking_id: str, status: str) -> None:
        self.booking_id = booking_id
        self.status = status
        super().__init__(f"Booking {booking_id} is {status} and cannot be cancelled")


def cancel_booking(
    *,
    venue_id: str,
    booking_id: str,
    cur: PgCursor | None = None,
) -> bool:
    """Cancel a booking of a venue.

    Idempotent: cancelling a cancelled booking is a no-op.

    Args:
        venue_id: Venue the booking must belong to.
        booking_id: Booking UUID.
        cur: Optional cursor to run inside the caller's transaction.

    Returns:
        True if the status changed, False if it was already cancelled.

    Raises:
        BookingNotFound: No such booking for this venue.
        BookingNotCancellable: The booking is completed.
    """

    def _do(c: PgCursor) -> bool:
        status = get_booking_status(c, venue_id=venue_id, booking_id=booking_id, lock=True)
        if status is None:
            raise BookingNotFound(booking_id)
        if status == "cancelled":
            return False
        if status == "completed":
            raise BookingNotCancellable(booking_id, status)

        set_booking_status(c, venue_id=venue_id, booking_id=booking_id, status="cancelled")
        return True

    if cur is not None:
        changed = _do(cur)
    else:
        with txn() as c:
            changed = _do(c)

    logger.info(
        "booking cancelled" if changed else "booking already cancelled",
        extra={"extra_fields": safe_log_context(venue_id=venue_id, booking_id=booking_id)},
    )
    return changed
