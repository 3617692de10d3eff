"""Structured JSON logging for the loans API client's own loggers"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from loans_api.config import settings

LIBRARY_LOGGER = "loans_api"

# Fields the dispatcher attaches to every call record
CALL_FIELDS = ("method", "endpoint", "status", "duration_ms", "error", "content_type")

LOG_FORMAT = " ".join(
    ["%(timestamp)s", "%(level)s", "%(name)s", "%(message)s"] + [f"%({field})s" for field in CALL_FIELDS]
)


class CallJsonFormatter(JsonFormatter):
    """JSON formatter for API call records, tagged with the configured service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name
        # Call fields a record does not carry are left out rather than emitted as null
        for field in CALL_FIELDS:
            if log_record.get(field) is None:
                log_record.pop(field, None)


def setup_logging(level: Optional[str] = None, stream: Any = None) -> logging.Logger:
    """
    Send the client's log records to a stream as JSON lines.

    Only the "loans_api" logger is configured; the host application's root
    logger is left alone. The level defaults to LOANS_API_LOG_LEVEL.
    """
    logger = logging.getLogger(LIBRARY_LOGGER)
    logger.setLevel(level or settings.log_level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(CallJsonFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
