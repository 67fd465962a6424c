"""Storage-level guards against double booking.

1. Partial unique index on (venue_id, booking_date, start_time) for
   non-cancelled bookings: two bookings can never start at the same time.
2. EXCLUDE USING GIST over the booking's [start, end) timestamp range for
   non-cancelled bookings: partial overlaps are rejected too.

tsrange('[)') matches the application's half-open rule, so a booking ending
at 11:00 and one starting at 11:00 do not collide. Admission takes an
advisory lock first; these constraints only fire when that path is bypassed.

Revision ID: 002_booking_overlap_constraint
Revises: 001_initial_schema
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op

revision = "002_booking_overlap_constraint"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        CREATE UNIQUE INDEX uq_bookings_venue_date_start_active
            ON bookings (venue_id, booking_date, start_time)
            WHERE status <> 'cancelled'
        """
    )
    op.execute(
        """
        ALTER TABLE bookings
            ADD CONSTRAINT no_booking_overlap
            EXCLUDE USING gist (
                venue_id WITH =,
                tsrange(
                    booking_date + start_time,
                    booking_date + start_time + duration_minutes * interval '1 minute',
                    '[)'
                ) WITH &&
            )
            WHERE (status <> 'cancelled')
        """
    )


def downgrade() -> None:
    op.execute("ALTER TABLE bookings DROP CONSTRAINT IF EXISTS no_booking_overlap")
    op.execute("DROP INDEX IF EXISTS uq_bookings_venue_date_start_active")
    # btree_gist is kept: other indexes may depend on it.
