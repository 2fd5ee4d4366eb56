"""
Custom log formatters.

Currently supports JSON formatting for structured logging.
"""

import json
import logging
from datetime import datetime

# Attributes every LogRecord carries; anything else came in through extra=...
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    Format log records as JSON for structured logging.

    Emits timestamp, level, logger name and message, plus any fields
    passed through ``extra=``. Token values must never be passed as extras.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value
        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)
