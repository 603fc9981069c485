"""
Pydantic validators for environment configuration.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeoutSettings(BaseModel):
    """Timeout configuration from environment."""

    connect: float = Field(default=5.0, gt=0, description="Connect timeout in seconds")
    read: float = Field(default=30.0, gt=0, description="Read timeout in seconds")
    write: float = Field(default=30.0, gt=0, description="Write timeout in seconds")
    pool: Optional[float] = Field(default=None, gt=0, description="Wait for a free connection")


class PoolSettings(BaseModel):
    """Outbound pool configuration from environment."""

    max_concurrency: int = Field(default=32, ge=1, description="Concurrent outbound sends")
    max_connections: int = Field(default=100, ge=1)
    max_keepalive_connections: int = Field(default=20, ge=0)


class SecuritySettings(BaseModel):
    """Security configuration from environment."""

    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_response_size: int = Field(default=10 * 1024 * 1024, gt=0, description="Buffered response cap (10MB)")


class LoggingSettings(BaseModel):
    """Logging configuration from environment."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    format: Literal["json", "text", "colored"] = Field(default="text")
    enable_console: bool = Field(default=True)
    enable_file: bool = Field(default=False)
    file_path: Optional[str] = None
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="10MB")
    backup_count: int = Field(default=5, ge=0)
    enable_correlation_id: bool = Field(default=True)
    log_attempts: bool = Field(default=True)

    @model_validator(mode='after')
    def validate_file_path(self) -> 'LoggingSettings':
        """file_path is required when enable_file=True."""
        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        return self


class EngineSettings(BaseSettings):
    """
    RestApiEngine configuration from environment variables.

    Reads from:
    1. Environment variables (REST_QUERY_*)
    2. .env file
    3. Defaults

    Example .env file:
        REST_QUERY_TIMEOUT_CONNECT=5
        REST_QUERY_TIMEOUT_READ=60
        REST_QUERY_POOL_MAX_CONCURRENCY=16
        REST_QUERY_SECURITY_MAX_RESPONSE_SIZE=20971520
        REST_QUERY_MAX_REDIRECTS=5
        REST_QUERY_LOG_LEVEL=DEBUG
        REST_QUERY_LOG_FORMAT=json

    Usage:
        >>> settings = EngineSettings()
        >>> settings.timeout_read
        60.0
    """

    model_config = SettingsConfigDict(
        env_prefix='REST_QUERY_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Timeouts
    timeout_connect: float = Field(default=5.0, gt=0)
    timeout_read: float = Field(default=30.0, gt=0)
    timeout_write: float = Field(default=30.0, gt=0)
    timeout_pool: Optional[float] = Field(default=None, gt=0)

    # Outbound pool
    pool_max_concurrency: int = Field(default=32, ge=1)
    pool_max_connections: int = Field(default=100, ge=1)
    pool_max_keepalive_connections: int = Field(default=20, ge=0)

    # Security
    security_verify_ssl: bool = Field(default=True)
    security_max_response_size: int = Field(default=10 * 1024 * 1024, gt=0)

    # Execution
    max_redirects: int = Field(default=5, ge=1, le=20)
    response_data_type_header: str = Field(default="X-OPENBLOCKS-RESPONSE-DATA-TYPE", min_length=1)

    # Logging
    log_enabled: bool = Field(default=False, description="Attach engine handlers at all")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)
    log_attempts: bool = Field(default=True)

    @field_validator('log_level', mode='before')
    @classmethod
    def upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_format', mode='before')
    @classmethod
    def lower_format(cls, v):
        return v.lower() if isinstance(v, str) else v

    def to_timeout_settings(self) -> TimeoutSettings:
        return TimeoutSettings(
            connect=self.timeout_connect,
            read=self.timeout_read,
            write=self.timeout_write,
            pool=self.timeout_pool,
        )

    def to_pool_settings(self) -> PoolSettings:
        return PoolSettings(
            max_concurrency=self.pool_max_concurrency,
            max_connections=self.pool_max_connections,
            max_keepalive_connections=self.pool_max_keepalive_connections,
        )

    def to_security_settings(self) -> SecuritySettings:
        return SecuritySettings(
            verify_ssl=self.security_verify_ssl,
            max_response_size=self.security_max_response_size,
        )

    def to_logging_settings(self) -> Optional[LoggingSettings]:
        """LoggingSettings, or None when engine logging is off."""
        if not self.log_enabled or (not self.log_enable_file and not self.log_enable_console):
            return None

        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            enable_console=self.log_enable_console,
            enable_file=self.log_enable_file,
            file_path=self.log_file_path,
            max_bytes=self.log_max_bytes,
            backup_count=self.log_backup_count,
            enable_correlation_id=self.log_enable_correlation_id,
            log_attempts=self.log_attempts,
        )
