"""
Main logger for the query engine.
"""

import logging
from typing import Any, Dict, Optional

from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter, QueryContextFilter
from .formatters import STANDARD_RECORD_FIELDS, get_formatter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data

DEFAULT_LOGGER_NAME = "rest_query_engine"


class EngineLogger:
    """
    Structured logger used by RestApiEngine.

    Keyword arguments of every log call become record fields after masking
    with ``mask_sensitive_data``, so credentials never reach a handler.

    Example:
        >>> logger = EngineLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Query finished", status=200, url="https://api.com/x?token=abc")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.config.level_number)
        self._logger.propagate = False

        # Reinitializing replaces the handlers of a previous instance
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)
            handler.close()

        filters = [QueryContextFilter()]
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)
        level = self.config.level_number

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

    @staticmethod
    def _extra(kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Mask values and rename keys that clash with LogRecord attributes."""
        masked = mask_sensitive_data(kwargs)
        return {
            (f"field_{key}" if key in STANDARD_RECORD_FIELDS else key): value
            for key, value in masked.items()
        }

    @property
    def log_attempts(self) -> bool:
        return self.config.log_attempts

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, extra=self._extra(kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, extra=self._extra(kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, extra=self._extra(kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, extra=self._extra(kwargs))

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log with traceback; call from an exception handler."""
        self._logger.exception(message, extra=self._extra(kwargs))

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.

        Example:
            >>> with EngineLogger(config) as logger:
            ...     logger.info("Processing...")
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                # File already gone or stream closed
                pass
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_logger: Optional[EngineLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> EngineLogger:
    """
    Global engine logger; created on first call.

    ``config`` is only used on the first call, use configure_logging to
    replace it.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = EngineLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> EngineLogger:
    """Replace the global engine logger with a newly configured one."""
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = EngineLogger(config)
    return _default_logger
