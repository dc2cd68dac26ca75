"""Structured Logging - one-line JSON log records keyed by model and operation.

Invariants:
    - Every record carries timestamp, level, logger and message
    - model_name, operation, record_id, error_code and path appear only when set
    - Non-JSON values (datetimes, ids) are stringified, never dropped
    - setup_logging owns exactly one root handler; calling it again swaps that handler

Design Decisions:
    - stdlib logging with a local JSONFormatter; log_format="text" for local runs
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ("model_name", "operation", "record_id", "error_code", "path")
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, getattr(record, key)) for key in EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


_installed: logging.Handler | None = None


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the application's root log handler."""
    global _installed
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root = logging.getLogger()
    if _installed is not None:
        root.removeHandler(_installed)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    _installed = handler
    return handler
