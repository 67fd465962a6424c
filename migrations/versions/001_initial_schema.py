"""Initial schema: users, venues, weekly hours, blocked dates, equipment, bookings.

Identifiers are text UUIDs generated in the database. Times of day are
`time` columns; 24:00 is a valid close_time. Money is an integer amount in
the currency's smallest unit.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op


# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE users (
            id               text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            external_subject text NOT NULL UNIQUE,
            email            text,
            name             text,
            created_at       timestamptz NOT NULL DEFAULT now()
        )
        """
    )
    op.execute(
        """
        CREATE TABLE venues (
            id             text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            owner_id       text NOT NULL REFERENCES users(id),
            name           text NOT NULL,
            price_per_hour integer NOT NULL CHECK (price_per_hour >= 0),
            is_active      boolean NOT NULL DEFAULT true,
            timezone       text NOT NULL DEFAULT 'UTC',
            created_at     timestamptz NOT NULL DEFAULT now(),
            updated_at     timestamptz NOT NULL DEFAULT now()
        )
        """
    )
    op.execute("CREATE INDEX ix_venues_owner_id ON venues (owner_id)")

    op.execute(
        """
        CREATE TABLE venue_hours (
            id          text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            venue_id    text NOT NULL REFERENCES venues(id) ON DELETE CASCADE,
            day_of_week smallint NOT NULL CHECK (day_of_week BETWEEN 0 AND 6),
            open_time   time NOT NULL,
            close_time  time NOT NULL,
            is_closed   boolean NOT NULL DEFAULT false,
            CONSTRAINT uq_venue_hours_day UNIQUE (venue_id, day_of_week),
            CONSTRAINT ck_venue_hours_order CHECK (is_closed OR open_time < close_time)
        )
        """
    )

    op.execute(
        """
        CREATE TABLE blocked_dates (
            id           text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            venue_id     text NOT NULL REFERENCES venues(id) ON DELETE CASCADE,
            blocked_date date NOT NULL,
            reason       text,
            created_at   timestamptz NOT NULL DEFAULT now(),
            CONSTRAINT uq_blocked_dates_day UNIQUE (venue_id, blocked_date)
        )
        """
    )

    op.execute(
        """
        CREATE TABLE venue_equipment (
            id             text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            venue_id       text NOT NULL REFERENCES venues(id) ON DELETE CASCADE,
            name           text NOT NULL,
            price          integer NOT NULL CHECK (price >= 0),
            equipment_type text NOT NULL DEFAULT 'item'
                           CHECK (equipment_type IN ('item', 'package')),
            is_available   boolean NOT NULL DEFAULT true
        )
        """
    )
    op.execute("CREATE INDEX ix_venue_equipment_venue_id ON venue_equipment (venue_id)")

    op.execute(
        """
        CREATE TABLE bookings (
            id                  text PRIMARY KEY DEFAULT gen_random_uuid()::text,
            venue_id            text NOT NULL REFERENCES venues(id) ON DELETE CASCADE,
            user_id             text REFERENCES users(id),
            booking_date        date NOT NULL,
            start_time          time NOT NULL,
            duration_minutes    integer NOT NULL
                                CHECK (duration_minutes > 0 AND duration_minutes % 30 = 0),
            status              text NOT NULL DEFAULT 'pending'
                                CHECK (status IN ('pending', 'confirmed', 'cancelled', 'completed')),
            source              text NOT NULL DEFAULT 'online'
                                CHECK (source IN ('online', 'manual')),
            total_price         integer NOT NULL DEFAULT 0 CHECK (total_price >= 0),
            customer_name       text,
            customer_email      text,
            customer_phone      text,
            notes               text,
            created_by_owner_id text REFERENCES users(id),
            created_at          timestamptz NOT NULL DEFAULT now(),
            updated_at          timestamptz NOT NULL DEFAULT now(),
            CONSTRAINT ck_bookings_customer CHECK (user_id IS NOT NULL OR customer_name IS NOT NULL)
        )
        """
    )
    op.execute(
        """
        CREATE INDEX ix_bookings_venue_date_active
            ON bookings (venue_id, booking_date, start_time)
            WHERE status <> 'cancelled'
        """
    )
    op.execute("CREATE INDEX ix_bookings_user_id ON bookings (user_id)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bookings")
    op.execute("DROP TABLE IF EXISTS venue_equipment")
    op.execute("DROP TABLE IF EXISTS blocked_dates")
    op.execute("DROP TABLE IF EXISTS venue_hours")
    op.execute("DROP TABLE IF EXISTS venues")
    op.execute("DROP TABLE IF EXISTS users")
