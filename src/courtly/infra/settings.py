"""Service configuration loaded from environment variables.

Values are read on every call so tests can patch os.environ freely.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping

from .time import resolve_timezone

DEFAULT_SLOT_MINUTES = 60
DEFAULT_PLATFORM_FEE_PERCENT = Decimal("5")
DEFAULT_TIMEZONE = "UTC"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """Runtime settings.

    Attributes:
        slot_minutes: Length of a bookable slot when callers don't pass one.
        platform_fee_percent: Customer-facing markup applied to venue rates.
        default_timezone: Timezone for venues that have none stored.
        log_level: Level for the JSON loggers.
    """

    slot_minutes: int = DEFAULT_SLOT_MINUTES
    platform_fee_percent: Decimal = DEFAULT_PLATFORM_FEE_PERCENT
    default_timezone: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from *environ* (defaults to os.environ).

    Raises:
        ValueError: If any variable holds an invalid value.
    """
    env = os.environ if environ is None else environ

    slot_minutes = _int_setting(env, "COURTLY_SLOT_MINUTES", DEFAULT_SLOT_MINUTES)
    if not 0 < slot_minutes <= 24 * 60:
        raise ValueError("COURTLY_SLOT_MINUTES must be between 1 and 1440")

    raw_fee = env.get("COURTLY_PLATFORM_FEE_PERCENT")
    fee = DEFAULT_PLATFORM_FEE_PERCENT
    if raw_fee:
        try:
            fee = Decimal(raw_fee)
        except InvalidOperation:
            raise ValueError(f"COURTLY_PLATFORM_FEE_PERCENT must be a number, got {raw_fee!r}")
        if not fee.is_finite() or fee < 0:
            raise ValueError("COURTLY_PLATFORM_FEE_PERCENT must be >= 0")

    tz_name = env.get("COURTLY_DEFAULT_TIMEZONE") or DEFAULT_TIMEZONE
    resolve_timezone(tz_name)

    log_level = (env.get("LOG_LEVEL") or "INFO").upper()
    if log_level not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")

    return Settings(
        slot_minutes=slot_minutes,
        platform_fee_percent=fee,
        default_timezone=tz_name,
        log_level=log_level,
    )


def get_settings() -> Settings:
    """Load settings from the process environment."""
    return load_settings()
