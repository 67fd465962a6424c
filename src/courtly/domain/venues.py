"""Venue lookup shared by the availability, admission and pricing flows."""

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import Venue
from courtly.infra.repositories.venues_repository import get_venue


class VenueNotFound(Exception):
    """Raised when a venue ID does not resolve to a venue row."""

    def __init__(self, venue_id: str) -> None:
        self.venue_id = venue_id
        super().__init__(f"Venue not found: {venue_id}")


def load_venue(cur: PgCursor, venue_id: str) -> Venue:
    venue = get_venue(cur, venue_id)
    if venue is None:
        raise VenueNotFound(venue_id)
    return venue
