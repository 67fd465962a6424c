"""Venue schedule endpoints: weekly opening hours and blocked dates.

GET    /venues/{venue_id}/hours                    → weekly hours (public)
PUT    /venues/{venue_id}/hours                    → replace week (owner)
GET    /venues/{venue_id}/blocked-dates            → upcoming blocked dates (public)
POST   /venues/{venue_id}/blocked-dates            → block a date (owner, 201)
DELETE /venues/{venue_id}/blocked-dates/{id}       → unblock (owner, 204)
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response
from pydantic import BaseModel, ConfigDict, Field

from courtly.api.ownership import VenueOwnerContext, require_venue_owner
from courtly.domain.models import OperatingHours
from courtly.domain.schedule import (
    BlockedDateNotFound,
    ScheduleValidationError,
    add_blocked_date,
    remove_blocked_date,
    save_operating_hours,
    upcoming_blocked_dates,
    weekly_schedule,
)
from courtly.domain.timeslots import parse_time
from courtly.domain.venues import VenueNotFound
from courtly.observability.correlation import get_correlation_id
from courtly.observability.logging import get_logger
from courtly.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/venues", tags=["schedule"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class DayHours(BaseModel):
    model_config = ConfigDict(extra="forbid")

    day_of_week: int = Field(..., ge=0, le=6)
    open_time: str = "09:00"
    close_time: str = "22:00"
    is_closed: bool = False


class WeeklyHoursRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hours: list[DayHours] = Field(..., max_length=7)


class BlockDateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    blocked_on: date = Field(..., alias="date")
    reason: str | None = None


def _to_operating_hours(day: DayHours) -> OperatingHours:
    try:
        open_time = parse_time(day.open_time)
        close_time = parse_time(day.close_time)
    except ValueError:
        raise HTTPException(status_code=422, detail="invalid_time")
    return OperatingHours(
        day_of_week=day.day_of_week,
        open_time=open_time,
        close_time=close_time,
        is_closed=day.is_closed,
    )


# ── Opening hours ─────────────────────────────────────────────────────────────


@router.get("/{venue_id}/hours")
def get_hours(venue_id: str = Path(..., description="Venue ID")) -> list[dict]:
    """Weekly opening hours, Sunday (0) first. Weekdays without a row are closed."""
    try:
        week = weekly_schedule(venue_id)
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")
    return [h.as_dict() for h in week]


@router.put("/{venue_id}/hours")
def put_hours(
    body: WeeklyHoursRequest,
    ctx: VenueOwnerContext = Depends(require_venue_owner),
) -> list[dict]:
    """Replace the whole week of opening hours.

    Fails with 422 on duplicate weekdays or open_time >= close_time on an
    open day. Requires venue ownership.
    """
    hours = [_to_operating_hours(day) for day in body.hours]
    try:
        saved = save_operating_hours(ctx.venue_id, hours)
    except ScheduleValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)

    logger.info(
        "hours updated",
        extra={
            "extra_fields": safe_log_context(
                correlation_id=get_correlation_id(),
                venue_id=ctx.venue_id,
                user_id=ctx.user.id,
            )
        },
    )
    return [h.as_dict() for h in saved]


# ── Blocked dates ─────────────────────────────────────────────────────────────


@router.get("/{venue_id}/blocked-dates")
def get_blocked_dates(
    venue_id: str = Path(..., description="Venue ID"),
    from_date: date | None = Query(None, alias="from"),
) -> list[dict]:
    """Blocked dates on or after *from* (all of them when omitted)."""
    try:
        rows = upcoming_blocked_dates(venue_id, from_date=from_date)
    except VenueNotFound:
        raise HTTPException(status_code=404, detail="Venue not found")
    return [b.as_dict() for b in rows]


@router.post("/{venue_id}/blocked-dates", status_code=201)
def post_blocked_date(
    body: BlockDateRequest,
    ctx: VenueOwnerContext = Depends(require_venue_owner),
) -> dict:
    """Close the venue for a whole day. Re-blocking a date updates its reason."""
    try:
        blocked = add_blocked_date(ctx.venue_id, body.blocked_on, body.reason)
    except ScheduleValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.reason_code)
    return blocked.as_dict()


@router.delete("/{venue_id}/blocked-dates/{blocked_date_id}", status_code=204)
def delete_blocked_date(
    blocked_date_id: str = Path(..., description="Blocked date ID"),
    ctx: VenueOwnerContext = Depends(require_venue_owner),
) -> Response:
    try:
        remove_blocked_date(ctx.venue_id, blocked_date_id)
    except BlockedDateNotFound:
        raise HTTPException(status_code=404, detail="Blocked date not found")
    return Response(status_code=204)
