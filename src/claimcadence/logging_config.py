"""
ClaimCadence Logging Setup

Structured JSON logs on stderr for the service and the CLI. Library
modules only ever call logging.getLogger(__name__); handlers are
attached here, once, by the entry points.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

# Extra record attributes copied into the JSON line when present
EXTRA_FIELDS = ("request_id", "claim_id", "track", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO", json_format: bool = True) -> logging.Logger:
    """
    Attach a single stderr handler to the claimcadence logger.

    Safe to call more than once; an existing handler is replaced.
    """
    logger = logging.getLogger("claimcadence")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    for existing in list(logger.handlers):
        if getattr(existing, "_claimcadence", False):
            logger.removeHandler(existing)
    handler._claimcadence = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
