"""Bookings repository - persistence for bookings.

Uses raw SQL with psycopg2 (no ORM).
Overlap rules live in courtly.domain.conflicts; this module only moves rows.
"""

from datetime import date

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import BookedInterval, BookingPayload
from courtly.domain.timeslots import format_time, parse_time


def list_active_bookings(
    cur: PgCursor,
    *,
    venue_id: str,
    booking_date: date,
) -> list[BookedInterval]:
    """List non-cancelled bookings of a venue on one date, earliest first.

    Args:
        cur: Database cursor.
        venue_id: Venue UUID.
        booking_date: Calendar date (venue-local).

    Returns:
        BookedInterval rows ordered by start time.
    """
    cur.execute(
        """
        SELECT id, start_time::text, duration_minutes, status
        FROM bookings
        WHERE venue_id = %s
          AND booking_date = %s
          AND status <> 'cancelled'
        ORDER BY start_time, id
        """,
        (venue_id, booking_date),
    )
    return [
        BookedInterval(
            id=str(row[0]),
            start_time=parse_time(row[1]),
            duration_minutes=int(row[2]),
            status=row[3],
        )
        for row in cur.fetchall()
    ]


def insert_booking(
    cur: PgCursor,
    *,
    venue_id: str,
    booking_date: date,
    start_time: int,
    duration_minutes: int,
    payload: BookingPayload,
) -> str:
    """Insert a booking row.

    Raises psycopg2.errors.UniqueViolation / ExclusionViolation when the
    storage-level overlap backstops fire; callers decide what that means.

    Returns:
        The new booking's UUID.
    """
    cur.execute(
        """
        INSERT INTO bookings (
            venue_id, booking_date, start_time, duration_minutes,
            status, source, total_price, user_id,
            customer_name, customer_email, customer_phone,
            notes, created_by_owner_id
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        RETURNING id
        """,
        (
            venue_id,
            booking_date,
            format_time(start_time),
            duration_minutes,
            payload.status,
            payload.source,
            payload.total_price,
            payload.user_id,
            payload.customer_name,
            payload.customer_email,
            payload.customer_phone,
            payload.notes,
            payload.created_by_owner_id,
        ),
    )
    row = cur.fetchone()
    return str(row[0])


def get_booking_status(
    cur: PgCursor,
    *,
    venue_id: str,
    booking_id: str,
    lock: bool = False,
) -> str | None:
    """Return a booking's status, or None if it doesn't belong to the venue.

    Args:
        lock: If True, appends FOR UPDATE to lock the row until commit.
    """
    suffix = " FOR UPDATE" if lock else ""
    cur.execute(
        f"SELECT status FROM bookings WHERE venue_id = %s AND id = %s{suffix}",
        (venue_id, booking_id),
    )
    row = cur.fetchone()
    return row[0] if row is not None else None


def set_booking_status(
    cur: PgCursor,
    *,
    venue_id: str,
    booking_id: str,
    status: str,
) -> None:
    cur.execute(
        """
        UPDATE bookings
        SET status = %s, updated_at = now()
        WHERE venue_id = %s AND id = %s
        """,
        (status, venue_id, booking_id),
    )
