"""
Log formatters: JSON, plain text and colored text.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

# Attributes every LogRecord has; anything else came in through ``extra``
STANDARD_RECORD_FIELDS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'asctime', 'taskName',
})


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Non-standard, non-private attributes of a record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in STANDARD_RECORD_FIELDS and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Example output:
        {"timestamp": "2024-01-15T10:30:45.123000Z", "level": "INFO",
         "logger": "rest_query_engine", "message": "Query finished",
         "status": 200, "correlation_id": "4f0c..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(extra_fields(record))

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        # default=str: extras may carry enums, URLs, exceptions
        return json.dumps(log_data, default=str, ensure_ascii=False)


# Query fields go first in text output, in this order
LEADING_FIELDS = ("correlation_id", "method", "url", "status", "duration_ms")


class TextFormatter(logging.Formatter):
    """
    Plain text formatter.

    Format: [timestamp] [level] [logger] message key=value ...

    Query fields (correlation_id, method, url, status, duration_ms) lead,
    the remaining extras follow in insertion order. None values are skipped.
    """

    def __init__(self):
        super().__init__(
            fmt='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format_field(self, key: str, value: Any) -> str:
        return f"{key}={value}"

    def format(self, record: logging.LogRecord) -> str:
        base_msg = super().format(record)

        fields = extra_fields(record)
        ordered = [key for key in LEADING_FIELDS if key in fields]
        ordered += [key for key in fields if key not in LEADING_FIELDS]

        pairs: List[str] = [
            self.format_field(key, fields[key]) for key in ordered if fields[key] is not None
        ]
        if pairs:
            base_msg += " " + " ".join(pairs)
        return base_msg


class ColoredFormatter(TextFormatter):
    """Text formatter with ANSI-colored level names and HTTP status classes."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[1;31m', # Bold Red
        'RESET': '\033[0m'
    }

    # first digit of the status code -> color
    STATUS_COLORS = {
        '2': COLORS['INFO'],
        '3': COLORS['DEBUG'],
        '4': COLORS['WARNING'],
        '5': COLORS['ERROR'],
    }

    def format_field(self, key: str, value: Any) -> str:
        text = super().format_field(key, value)
        if key == 'status':
            color = self.STATUS_COLORS.get(str(value)[:1])
            if color:
                return f"{color}{text}{self.COLORS['RESET']}"
        return text

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname



def get_formatter(format_type: str) -> logging.Formatter:
    """
    Get formatter by type.

    Raises:
        ValueError: If format_type is unknown
    """
    formatters = {
        "json": JSONFormatter,
        "text": TextFormatter,
        "colored": ColoredFormatter,
    }

    formatter_class = formatters.get(format_type.lower())
    if not formatter_class:
        raise ValueError(
            f"Unknown format type: {format_type}. "
            f"Available: {', '.join(formatters.keys())}"
        )

    return formatter_class()
