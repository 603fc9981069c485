"""
Logging system for the query engine.

Example:
    >>> from rest_query_engine.core.logging import LoggingConfig, configure_logging
    >>>
    >>> logger = configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    >>> logger.info("Query finished", status=200)
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import EngineLogger, get_logger, configure_logging
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    QueryContextFilter,
    correlation_scope,
    set_correlation_id,
    get_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "EngineLogger",
    "get_logger",
    "configure_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "QueryContextFilter",
    "correlation_scope",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
