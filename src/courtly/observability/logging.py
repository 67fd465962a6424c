"""JSON log lines for the HTTP layer.

Every line names the service and carries the request's correlation ID.
Fields passed as ``extra={"extra_fields": {...}}`` are merged in after a last
PII pass, so a call that skipped safe_log_context still logs no customer
contact details.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Mapping

from .correlation import get_correlation_id
from .redaction import mask_pii_fields

SERVICE_NAME = "courtly"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }

        cid = get_correlation_id()
        if cid:
            line["correlation_id"] = cid

        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        fields = getattr(record, "extra_fields", None)
        if isinstance(fields, Mapping):
            for key, value in mask_pii_fields(fields).items():
                # Reserved keys win over caller-provided ones
                line.setdefault(key, value)

        return json.dumps(line, default=str)


def get_logger(name: str) -> logging.Logger:
    """Logger writing JSON lines to stdout at LOG_LEVEL (default INFO)."""
    logger = logging.getLogger(name)
    if any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers):
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    logger.propagate = False
    return logger
