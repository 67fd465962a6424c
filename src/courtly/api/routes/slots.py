"""Public availability endpoint.

GET /venues/{venue_id}/slots?date=YYYY-MM-DD[&slot_minutes=N]
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, Path, Query

from courtly.domain.availability import get_venue_slots
from courtly.domain.timeslots import format_time
from courtly.domain.venues import VenueNotFound

router = APIRouter(prefix="/venues", tags=["slots"])


@router.get("/{venue_id}/slots")
def list_slots(
    venue_id: str = Path(..., description="Venue ID"),
    target_date: date = Query(..., alias="date", description="Date (YYYY-MM-DD)"),
    slot_minutes: int | None = Query(None, gt=0, le=1440),
) -> dict:
    """List a venue's bookable slots for one date.

    A closed or blocked day returns an empty list. Each slot carries an
    availability flag; the client can hide or grey out taken slots.
    """
    try:
        slots = get_venue_slots(venue_id, target_date, slot_minutes=slot_minutes)
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")

    return {
        "venue_id": venue_id,
        "date": target_date.isoformat(),
        "slots": [s.as_dict() for s in slots],
        "first_available": next(
            (format_time(s.start_time) for s in slots if s.available), None
        ),
    }
