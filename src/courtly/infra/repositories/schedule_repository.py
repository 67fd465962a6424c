"""Schedule repository - persistence for venue_hours and blocked_dates.

Uses raw SQL with psycopg2 (no ORM). Times cross this boundary as text so
that a closing time of 24:00 survives the round trip.
"""

from datetime import date
from typing import Sequence

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import BlockedDate, OperatingHours
from courtly.domain.timeslots import format_time, parse_time


def _hours_from_row(row: tuple) -> OperatingHours:
    return OperatingHours(
        day_of_week=row[0],
        open_time=parse_time(row[1]),
        close_time=parse_time(row[2]),
        is_closed=bool(row[3]),
    )


def get_operating_hours(
    cur: PgCursor,
    *,
    venue_id: str,
    day_of_week: int,
) -> OperatingHours | None:
    """Fetch the opening-hours row for one weekday (0 = Sunday)."""
    cur.execute(
        """
        SELECT day_of_week, open_time::text, close_time::text, is_closed
        FROM venue_hours
        WHERE venue_id = %s AND day_of_week = %s
        """,
        (venue_id, day_of_week),
    )
    row = cur.fetchone()
    return _hours_from_row(row) if row is not None else None


def list_operating_hours(cur: PgCursor, venue_id: str) -> list[OperatingHours]:
    """Fetch the full week of opening hours, ordered Sunday first."""
    cur.execute(
        """
        SELECT day_of_week, open_time::text, close_time::text, is_closed
        FROM venue_hours
        WHERE venue_id = %s
        ORDER BY day_of_week
        """,
        (venue_id,),
    )
    return [_hours_from_row(row) for row in cur.fetchall()]


def replace_operating_hours(
    cur: PgCursor,
    *,
    venue_id: str,
    hours: Sequence[OperatingHours],
) -> None:
    """Replace every opening-hours row of a venue.

    Must run inside a transaction so readers never observe an empty week.
    """
    cur.execute("DELETE FROM venue_hours WHERE venue_id = %s", (venue_id,))
    for h in hours:
        cur.execute(
            """
            INSERT INTO venue_hours (venue_id, day_of_week, open_time, close_time, is_closed)
            VALUES (%s, %s, %s, %s, %s)
            """,
            (venue_id, h.day_of_week, format_time(h.open_time), format_time(h.close_time), h.is_closed),
        )


def list_blocked_dates(
    cur: PgCursor,
    *,
    venue_id: str,
    on: date | None = None,
    from_date: date | None = None,
) -> list[BlockedDate]:
    """List blocked dates for a venue.

    Args:
        cur: Database cursor.
        venue_id: Venue UUID.
        on: Only rows for exactly this date.
        from_date: Only rows on or after this date.

    Returns:
        BlockedDate rows ordered by date.
    """
    conditions = ["venue_id = %s"]
    params: list = [venue_id]

    if on is not None:
        conditions.append("blocked_date = %s")
        params.append(on)
    if from_date is not None:
        conditions.append("blocked_date >= %s")
        params.append(from_date)

    where = " AND ".join(conditions)
    cur.execute(
        f"""
        SELECT id, blocked_date, reason
        FROM blocked_dates
        WHERE {where}
        ORDER BY blocked_date
        """,
        params,
    )
    return [
        BlockedDate(id=str(row[0]), blocked_date=row[1], reason=row[2])
        for row in cur.fetchall()
    ]


def upsert_blocked_date(
    cur: PgCursor,
    *,
    venue_id: str,
    blocked_date: date,
    reason: str | None,
) -> BlockedDate:
    """Insert a blocked date, or update the reason if the date is already blocked."""
    cur.execute(
        """
        INSERT INTO blocked_dates (venue_id, blocked_date, reason)
        VALUES (%s, %s, %s)
        ON CONFLICT (venue_id, blocked_date)
        DO UPDATE SET reason = COALESCE(EXCLUDED.reason, blocked_dates.reason)
        RETURNING id, blocked_date, reason
        """,
        (venue_id, blocked_date, reason),
    )
    row = cur.fetchone()
    return BlockedDate(id=str(row[0]), blocked_date=row[1], reason=row[2])


def delete_blocked_date(cur: PgCursor, *, venue_id: str, blocked_date_id: str) -> bool:
    """Delete a blocked date. Returns False if no row matched."""
    cur.execute(
        "DELETE FROM blocked_dates WHERE venue_id = %s AND id = %s RETURNING id",
        (venue_id, blocked_date_id),
    )
    return cur.fetchone() is not None
