"""Structured logging support for the Daily Five generator."""

import json
import logging
import traceback
from datetime import datetime, timezone

# Extra record attributes copied into structured output when present
EXTRA_FIELDS = ("day", "day_index", "source", "attempt", "status_code", "duration_ms", "error_type")


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_obj[name] = value

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class RunContextFilter(logging.Filter):
    """Stamp every record with the day being generated."""

    def __init__(self, day: str | None = None, day_index: int | None = None):
        super().__init__()
        self.day = day
        self.day_index = day_index

    def filter(self, record: logging.LogRecord) -> bool:
        if self.day and not hasattr(record, "day"):
            record.day = self.day
        if self.day_index and not hasattr(record, "day_index"):
            record.day_index = self.day_index
        return True
