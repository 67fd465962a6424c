"""Correlation ID management for request tracing."""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

# Visible across threads started by the request and across awaits
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"

_MAX_INBOUND_LENGTH = 128


def get_correlation_id() -> str:
    """Get current correlation ID from context ("" outside a request)."""
    return correlation_id_var.get()


def accept_inbound(header_value: str | None) -> str:
    """Reuse a caller-supplied correlation ID or mint a fresh one.

    Inbound values that are empty, oversized or contain whitespace are
    replaced so they cannot break log lines.
    """
    if header_value:
        candidate = header_value.strip()
        if candidate and len(candidate) <= _MAX_INBOUND_LENGTH and not any(
            ch.isspace() for ch in candidate
        ):
            return candidate
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(cid: str) -> Iterator[str]:
    """Bind *cid* as the current correlation ID for the duration of the block."""
    token = correlation_id_var.set(cid)
    try:
        yield cid
    finally:
        correlation_id_var.reset(token)
