"""Booking endpoints.

POST /venues/{venue_id}/bookings                      → customer booking (pending)
POST /venues/{venue_id}/manual-bookings               → owner-entered booking (confirmed)
POST /venues/{venue_id}/bookings/{booking_id}/cancel  → cancel (owner)

Admission outcomes map to 201 {"booking_id"} or 409 with the rejection
reason, a user-facing message and the conflicting booking when known.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import psycopg2
from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from courtly.api.auth import CurrentUser, get_current_user
from courtly.api.ownership import VenueOwnerContext, require_venue_owner
from courtly.api.routes.quotes import EquipmentLine, to_selections
from courtly.domain.admission import (
    AdmissionOutcome,
    Admitted,
    BookingValidationError,
    OutsideOperatingHours,
    admit_booking,
    build_interval,
)
from courtly.domain.cancellation import BookingNotCancellable, BookingNotFound, cancel_booking
from courtly.domain.models import BookingPayload
from courtly.domain.pricing import PriceValidationError, calculate_price, quote_booking
from courtly.domain.timeslots import hours_to_minutes
from courtly.domain.venues import VenueNotFound
from courtly.infra.db import StorageError, txn
from courtly.observability.correlation import get_correlation_id
from courtly.observability.logging import get_logger
from courtly.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/venues", tags=["bookings"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_date: date = Field(..., alias="date")
    start_time: str
    duration_hours: Decimal = Field(..., gt=0)
    equipment: list[EquipmentLine] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=1000)


class ManualBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_date: date = Field(..., alias="date")
    start_time: str
    duration_hours: Decimal = Field(..., gt=0)
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: str | None = Field(None, max_length=320)
    customer_phone: str | None = Field(None, max_length=50)
    notes: str | None = Field(None, max_length=1000)
    total_price: int | None = Field(None, ge=0)

    @field_validator("customer_name")
    @classmethod
    def customer_name_not_blank(cls, v: str) -> str:
        """Strip the name and refuse whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("customer_name cannot be empty")
        return v


# ── Helpers ───────────────────────────────────────────────────────────────────


def _outcome_response(outcome: AdmissionOutcome) -> JSONResponse:
    if isinstance(outcome, Admitted):
        return JSONResponse(status_code=201, content={"booking_id": outcome.booking_id})
    return JSONResponse(
        status_code=409,
        content={
            "reason": outcome.reason.value,
            "message": outcome.message,
            "conflicting_booking_id": outcome.conflicting_booking_id,
        },
    )


def _duration_minutes(start_time: str, duration_hours: Decimal) -> int:
    """Convert the requested length to minutes and check the interval shape."""
    try:
        minutes = hours_to_minutes(duration_hours)
    except ValueError:
        raise HTTPException(status_code=422, detail="invalid_duration")
    try:
        build_interval(start_time, minutes)
    except BookingValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)
    return minutes


# ── POST /venues/{venue_id}/bookings ──────────────────────────────────────────


@router.post("/{venue_id}/bookings", status_code=201)
def create_booking(
    body: CreateBookingRequest,
    venue_id: str = Path(..., description="Venue ID"),
    user: CurrentUser = Depends(get_current_user),
) -> JSONResponse:
    """Book a slot as a signed-in customer.

    The booking starts pending; the price is quoted server-side with the
    platform fee applied. Returns 409 when the interval is taken or the
    venue is closed, 422 for malformed requests.
    """
    duration_minutes = _duration_minutes(body.start_time, body.duration_hours)

    try:
        with txn() as cur:
            breakdown = quote_booking(
                venue_id=venue_id,
                duration_hours=body.duration_hours,
                equipment_selections=to_selections(body.equipment),
                cur=cur,
            )
            payload = BookingPayload(
                status="pending",
                source="online",
                total_price=breakdown.total,
                user_id=user.id,
                notes=body.notes,
            )
            outcome = admit_booking(
                venue_id=venue_id,
                booking_date=body.booking_date,
                start_time=body.start_time,
                duration_minutes=duration_minutes,
                payload=payload,
                cur=cur,
            )
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")
    except (BookingValidationError, PriceValidationError) as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)
    except OutsideOperatingHours as exc:
        raise HTTPException(status_code=409, detail=exc.reason_code)
    except psycopg2.Error as exc:
        raise StorageError("create_booking", exc) from exc

    logger.info(
        "customer booking processed",
        extra={
            "extra_fields": safe_log_context(
                correlation_id=get_correlation_id(),
                venue_id=venue_id,
                user_id=user.id,
                admitted=isinstance(outcome, Admitted),
                total=breakdown.total,
            )
        },
    )
    return _outcome_response(outcome)


# ── POST /venues/{venue_id}/manual-bookings ───────────────────────────────────


@router.post("/{venue_id}/manual-bookings", status_code=201)
def create_manual_booking(
    body: ManualBookingRequest,
    ctx: VenueOwnerContext = Depends(require_venue_owner),
) -> JSONResponse:
    """Record a booking taken by phone or at the desk.

    Manual bookings are confirmed straight away. Without an explicit
    total_price the owner's hourly rate is charged, without platform fee.
    Requires venue ownership.
    """
    duration_minutes = _duration_minutes(body.start_time, body.duration_hours)

    total_price = body.total_price
    if total_price is None:
        try:
            total_price = calculate_price(
                base_rate=ctx.venue.price_per_hour,
                duration_hours=body.duration_hours,
            ).total
        except PriceValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.reason_code)

    payload = BookingPayload(
        status="confirmed",
        source="manual",
        total_price=total_price,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        notes=body.notes,
        created_by_owner_id=ctx.user.id,
    )

    try:
        outcome = admit_booking(
            venue_id=ctx.venue_id,
            booking_date=body.booking_date,
            start_time=body.start_time,
            duration_minutes=duration_minutes,
            payload=payload,
        )
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")
    except BookingValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)
    except OutsideOperatingHours as exc:
        raise HTTPException(status_code=409, detail=exc.reason_code)

    logger.info(
        "manual booking processed",
        extra={
            "extra_fields": safe_log_context(
                correlation_id=get_correlation_id(),
                venue_id=ctx.venue_id,
                user_id=ctx.user.id,
                admitted=isinstance(outcome, Admitted),
            )
        },
    )
    return _outcome_response(outcome)


# ── POST /venues/{venue_id}/bookings/{booking_id}/cancel ──────────────────────


@router.post("/{venue_id}/bookings/{booking_id}/cancel")
def cancel(
    booking_id: str = Path(..., description="Booking ID"),
    ctx: VenueOwnerContext = Depends(require_venue_owner),
) -> dict:
    """Cancel a booking. The slot becomes bookable again. Requires venue ownership."""
    try:
        changed = cancel_booking(venue_id=ctx.venue_id, booking_id=booking_id)
    except BookingNotFound:
        raise HTTPException(status_code=404, detail="Booking not found")
    except BookingNotCancellable as exc:
        raise HTTPException(status_code=409, detail=f"booking_{exc.status}")

    return {"booking_id": booking_id, "status": "cancelled", "changed": changed}
