"""Venue ownership guard.

Opening hours, blocked dates, manual bookings and cancellations may only be
changed by the venue's owner.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Path

from courtly.api.auth import CurrentUser, get_current_user
from courtly.domain.models import Venue


@dataclass
class VenueOwnerContext:
    """Context returned by require_venue_owner."""

    user: CurrentUser
    venue: Venue

    @property
    def venue_id(self) -> str:
        return self.venue.id


def _load_venue(venue_id: str) -> Venue | None:
    from courtly.infra.db import txn
    from courtly.infra.repositories.venues_repository import get_venue

    with txn() as cur:
        return get_venue(cur, venue_id)


def require_venue_owner(
    venue_id: str = Path(..., description="Venue ID"),
    user: CurrentUser = Depends(get_current_user),
) -> VenueOwnerContext:
    """FastAPI dependency: 404 for unknown venues, 403 unless the user owns it.

    Usage:
        @router.put("/venues/{venue_id}/hours")
        def endpoint(ctx: VenueOwnerContext = Depends(require_venue_owner)):
            ...
    """
    venue = _load_venue(venue_id)
    if venue is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    if venue.owner_id != user.id:
        raise HTTPException(status_code=403, detail="Not the venue owner")
    return VenueOwnerContext(user=user, venue=venue)
