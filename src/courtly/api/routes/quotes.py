"""Public price quote endpoint.

POST /venues/{venue_id}/quote
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field

from courtly.domain.pricing import EquipmentSelection, PriceValidationError, quote_booking
from courtly.domain.venues import VenueNotFound

router = APIRouter(prefix="/venues", tags=["quotes"])


class EquipmentLine(BaseModel):
    model_config = ConfigDict(extra="forbid")

    equipment_id: str
    quantity: int = Field(1, ge=1)


class QuoteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration_hours: Decimal = Field(..., gt=0)
    equipment: list[EquipmentLine] = Field(default_factory=list)


def to_selections(lines: list[EquipmentLine]) -> list[EquipmentSelection]:
    return [EquipmentSelection(equipment_id=l.equipment_id, quantity=l.quantity) for l in lines]


@router.post("/{venue_id}/quote")
def post_quote(
    body: QuoteRequest,
    venue_id: str = Path(..., description="Venue ID"),
) -> dict:
    """Price a booking before it is made.

    Amounts are integers in the currency's smallest unit. customer_rate
    already includes the platform fee.
    """
    try:
        breakdown = quote_booking(
            venue_id=venue_id,
            duration_hours=body.duration_hours,
            equipment_selections=to_selections(body.equipment),
        )
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")
    except PriceValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)

    return breakdown.as_dict()
