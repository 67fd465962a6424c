"""Redaction helpers for safe logging.

Booking payloads carry customer names, phones and emails. Anything that
might contain them must pass through safe_log_context before being logged.
"""

import re
from typing import Any, Mapping

_PHONE_PATTERN = re.compile(r"\+?\d[\d\s\-()]{8,}\d")
_EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

# Keys whose values are personal data no matter what they look like
_PII_KEYS = frozenset(
    {"customer_name", "customer_email", "customer_phone", "email", "name", "phone", "notes"}
)

_REDACTED = "[REDACTED]"


def redact_string(value: str) -> str:
    """Mask phone numbers and email addresses inside free text."""
    return _EMAIL_PATTERN.sub(_REDACTED, _PHONE_PATTERN.sub(_REDACTED, value))


def redact_value(value: Any) -> str:
    """Render any value as a log-safe string."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return redact_string(value)
    if isinstance(value, dict):
        return f"dict(keys={sorted(value.keys())})"
    if isinstance(value, (list, tuple, set, frozenset)):
        return f"list(len={len(value)})"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return f"<{type(value).__name__}>"


def safe_log_context(**kwargs: Any) -> dict[str, str]:
    """Build a context dict safe for logging.

    PII keys are masked outright (None stays "null"). Identifier keys
    ("id", "*_id") are logged verbatim: UUIDs contain digit runs that the
    phone pattern would otherwise eat. Everything else goes through
    redact_value.
    """
    context: dict[str, str] = {}
    for key, value in kwargs.items():
        if key in _PII_KEYS and value is not None:
            context[key] = _REDACTED
        elif isinstance(value, str) and (key == "id" or key.endswith("_id")):
            context[key] = value
        else:
            context[key] = redact_value(value)
    return context


def mask_pii_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Mask PII keys in an already-built context, leaving other values as they are."""
    return {
        key: _REDACTED if key in _PII_KEYS and value is not None else value
        for key, value in fields.items()
    }
