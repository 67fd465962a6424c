"""Venues repository - read access to venue rows.

Uses raw SQL with psycopg2 (no ORM).
"""

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import Venue
from courtly.infra.db import fetchone
from courtly.infra.settings import get_settings


def get_venue(cur: PgCursor, venue_id: str) -> Venue | None:
    """Retrieve a venue by ID.

    Venues without a stored timezone fall back to COURTLY_DEFAULT_TIMEZONE.

    Args:
        cur: Database cursor.
        venue_id: Venue UUID.

    Returns:
        Venue or None if not found.
    """
    row = fetchone(
        cur,
        """
        SELECT id, owner_id, name, price_per_hour, is_active, timezone
        FROM venues
        WHERE id = %s
        """,
        (venue_id,),
    )
    if row is None:
        return None

    return Venue(
        id=str(row[0]),
        owner_id=str(row[1]),
        name=row[2],
        price_per_hour=int(row[3]),
        is_active=bool(row[4]),
        timezone=row[5] or get_settings().default_timezone,
    )
