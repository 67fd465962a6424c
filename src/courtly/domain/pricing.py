"""Booking price calculation.

Pure calculation functions; quote_booking() is the only entry point that
reads the database (venue rate and equipment catalog).

    customer_rate      = pricing_policy(base_rate)
    venue_subtotal     = customer_rate * duration_hours
    equipment_subtotal = sum(item.price * quantity)
    total              = venue_subtotal + equipment_subtotal

The pricing policy is injected. The marketplace default adds a platform fee
on top of the owner's listed rate, rounded up to a whole unit. There is no
discounting, tax or currency conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Iterable, Mapping

from psycopg2.extensions import cursor as PgCursor

from courtly.domain.models import EquipmentItem
from courtly.domain.venues import load_venue
from courtly.infra.db import txn
from courtly.infra.repositories.equipment_repository import fetch_equipment_catalog
from courtly.infra.settings import get_settings

PricingPolicy = Callable[[int], int]

_HUNDRED = Decimal(100)


class PriceValidationError(ValueError):
    def __init__(self, reason_code: str, meta: dict | None = None) -> None:
        self.reason_code = reason_code
        self.meta = meta or {}
        super().__init__(f"Invalid price request: {reason_code}")


@dataclass(frozen=True)
class EquipmentSelection:
    equipment_id: str
    quantity: int = 1


@dataclass(frozen=True)
class PriceBreakdown:
    customer_rate: int
    venue_subtotal: int
    equipment_subtotal: int
    total: int

    def as_dict(self) -> dict:
        return {
            "customer_rate": self.customer_rate,
            "venue_subtotal": self.venue_subtotal,
            "equipment_subtotal": self.equipment_subtotal,
            "total": self.total,
        }


def identity_policy(base_rate: int) -> int:
    return base_rate


def _percent(percent: int | str | Decimal) -> Decimal:
    value = Decimal(str(percent))
    if not value.is_finite() or value < 0:
        raise ValueError(f"Fee percent must be >= 0, got {percent!r}")
    return value


def platform_fee_policy(percent: int | str | Decimal = 5) -> PricingPolicy:
    """Build a policy that adds *percent* on top of the owner's rate.

    The customer price is rounded up: an owner listing 40 with a 5 % fee
    shows 42 to customers.
    """
    factor = 1 + _percent(percent) / _HUNDRED

    def policy(base_rate: int) -> int:
        return int((Decimal(base_rate) * factor).to_integral_value(rounding=ROUND_CEILING))

    return policy


def platform_fee(owner_price: int, percent: int | str | Decimal = 5) -> int:
    """Fee the platform keeps when the owner lists *owner_price*."""
    return platform_fee_policy(percent)(owner_price) - owner_price


def owner_price(customer_price: int, percent: int | str | Decimal = 5) -> int:
    """What the owner receives out of *customer_price* (rounded down)."""
    factor = 1 + _percent(percent) / _HUNDRED
    return int((Decimal(customer_price) / factor).to_integral_value(rounding=ROUND_FLOOR))


def _duration_decimal(duration_hours: int | float | str | Decimal) -> Decimal:
    try:
        duration = Decimal(str(duration_hours))
    except InvalidOperation:
        raise PriceValidationError("invalid_duration", {"duration_hours": str(duration_hours)})
    if not duration.is_finite() or duration <= 0:
        raise PriceValidationError("invalid_duration", {"duration_hours": str(duration_hours)})
    # Durations come in half-hour steps
    if (duration * 2) != (duration * 2).to_integral_value():
        raise PriceValidationError("invalid_duration", {"duration_hours": str(duration_hours)})
    return duration


def calculate_price(
    *,
    base_rate: int,
    duration_hours: int | float | str | Decimal,
    equipment_selections: Iterable[EquipmentSelection] = (),
    equipment_catalog: Mapping[str, EquipmentItem] | None = None,
    pricing_policy: PricingPolicy = identity_policy,
) -> PriceBreakdown:
    """Calculate the payable amount for a booking.

    Args:
        base_rate: Owner's hourly rate (>= 0).
        duration_hours: Booking length in hours, in 0.5 steps.
        equipment_selections: Items and quantities the customer picked.
        equipment_catalog: The venue's equipment keyed by ID.
        pricing_policy: Transform from owner rate to customer rate.

    Returns:
        PriceBreakdown. A half-unit venue subtotal (odd rate * x.5 hours) is
        rounded half-up.

    Raises:
        PriceValidationError: Negative rate, bad duration, non-positive
            quantity, unknown or unavailable equipment.
    """
    if base_rate < 0:
        raise PriceValidationError("negative_rate", {"base_rate": base_rate})
    duration = _duration_decimal(duration_hours)

    customer_rate = pricing_policy(base_rate)
    if customer_rate < 0:
        raise PriceValidationError("negative_rate", {"customer_rate": customer_rate})

    venue_subtotal = int(
        (Decimal(customer_rate) * duration).to_integral_value(rounding=ROUND_HALF_UP)
    )

    catalog = equipment_catalog or {}
    equipment_subtotal = 0
    for selection in equipment_selections:
        if selection.quantity < 1:
            raise PriceValidationError(
                "invalid_quantity",
                {"equipment_id": selection.equipment_id, "quantity": selection.quantity},
            )
        item = catalog.get(selection.equipment_id)
        if item is None:
            raise PriceValidationError("unknown_equipment", {"equipment_id": selection.equipment_id})
        if not item.is_available:
            raise PriceValidationError(
                "equipment_unavailable", {"equipment_id": selection.equipment_id}
            )
        equipment_subtotal += item.price * selection.quantity

    return PriceBreakdown(
        customer_rate=customer_rate,
        venue_subtotal=venue_subtotal,
        equipment_subtotal=equipment_subtotal,
        total=venue_subtotal + equipment_subtotal,
    )


def configured_policy() -> PricingPolicy:
    """Policy from COURTLY_PLATFORM_FEE_PERCENT."""
    return platform_fee_policy(get_settings().platform_fee_percent)


def quote_booking(
    *,
    venue_id: str,
    duration_hours: int | float | str | Decimal,
    equipment_selections: Iterable[EquipmentSelection] = (),
    pricing_policy: PricingPolicy | None = None,
    cur: PgCursor | None = None,
) -> PriceBreakdown:
    """Price a prospective booking at a venue.

    Raises:
        VenueNotFound: Unknown venue.
        PriceValidationError: See calculate_price().
    """
    policy = pricing_policy if pricing_policy is not None else configured_policy()
    selections = list(equipment_selections)

    def _do(c: PgCursor) -> PriceBreakdown:
        venue = load_venue(c, venue_id)
        catalog = fetch_equipment_catalog(c, venue_id) if selections else {}
        return calculate_price(
            base_rate=venue.price_per_hour,
            duration_hours=duration_hours,
            equipment_selections=selections,
            equipment_catalog=catalog,
            pricing_policy=policy,
        )

    if cur is not None:
        return _do(cur)
    with txn() as c:
        return _do(c)
