"""
Logging configuration for the query engine.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for engine logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Output format (json, text, colored)
        enable_console: Enable console (stderr) logging
        enable_file: Enable file logging
        file_path: Path to log file (required if enable_file=True)
        max_bytes: Max log file size before rotation (default: 10MB)
        backup_count: Number of backup log files to keep (default: 5)
        enable_correlation_id: Tag every record of one query invocation with its id
        log_attempts: Log each send attempt (redirect hops, digest retries) at DEBUG
        extra_fields: Additional fields to add to every log entry

    Example:
        >>> config = LoggingConfig.create(
        ...     level="DEBUG",
        ...     format="json",
        ...     extra_fields={"service": "query-runner"}
        ... )
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_correlation_id: bool = True
    log_attempts: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @property
    def level_number(self) -> int:
        """Numeric level for the stdlib logging module."""
        return getattr(logging, self.level.value)

    @property
    def has_output(self) -> bool:
        """At least one handler will be attached."""
        return self.enable_console or (self.enable_file and bool(self.file_path))

    def with_level(self, level: str) -> "LoggingConfig":
        """
        Copy with another level.

        Example:
            >>> LoggingConfig().with_level("debug").level
            <LogLevel.DEBUG: 'DEBUG'>
        """
        return replace(self, level=LogLevel(level.upper()))

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        enable_correlation_id: bool = True,
        log_attempts: bool = True,
        extra_fields: Optional[Dict[str, Any]] = None
    ) -> "LoggingConfig":
        """
        Create LoggingConfig from plain string values.

        Raises:
            ValueError: Unknown level or format
        """
        return cls(
            level=LogLevel(level.upper()),
            format=LogFormat(format.lower()),
            enable_console=enable_console,
            enable_file=enable_file,
            file_path=file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            enable_correlation_id=enable_correlation_id,
            log_attempts=log_attempts,
            extra_fields=extra_fields or {}
        )
