# backend/rentdesk/logging_config.py
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .middleware.request_id import get_request_id

# Keys services pass via `extra=` that are lifted into the JSON line.
STRUCTURED_EXTRAS = (
    "user_id",
    "application_id",
    "property_id",
    "lease_id",
    "payment_id",
    "status",
    "latency_ms",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, stamped with the current request id."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            payload["request_id"] = rid

        for key in STRUCTURED_EXTRAS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _level(env_name: str, default: str) -> str:
    return (os.getenv(env_name) or default).upper()


def configure_logging(level: Optional[str] = None) -> None:
    """Route everything through a single stdout JSON handler. Safe to call more than once."""
    lvl = (level or _level("LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(lvl)
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(lvl)

    logging.getLogger("uvicorn.access").setLevel(lvl)
    logging.getLogger("sqlalchemy.engine").setLevel(_level("SQL_LOG_LEVEL", "WARNING"))
    logging.getLogger("httpx").setLevel(_level("HTTPX_LOG_LEVEL", "WARNING"))
