"""Logging setup for command-line execution."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

# LogRecord attributes passed through `extra=` that are copied into the JSON line.
_CONTEXT_FIELDS = ("order_id", "phase", "elapsed_units")


class JsonConsoleFormatter(logging.Formatter):
    """JSON formatter that tags every line with the ordering session.

    Order context given via ``extra={"order_id": ..., "phase": ...}`` is
    emitted as top-level keys so one order can be followed across the
    tick thread and the main thread.
    """

    def __init__(self, session_id: str | None = None) -> None:
        super().__init__()
        self.session_id = session_id

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if self.session_id:
            event["session_id"] = self.session_id
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "restaurant_client",
    level: int = logging.INFO,
    *,
    session_id: str | None = None,
) -> logging.Logger:
    """Create the process logger, or retag its handlers for a new session."""
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    formatter = JsonConsoleFormatter(session_id=session_id)
    if logger.handlers:
        for existing in logger.handlers:
            existing.setFormatter(formatter)
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
