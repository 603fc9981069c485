"""
Load EngineConfig from environment variables and .env files.
"""

from typing import Any, Optional

from ..config import EngineConfig, PoolConfig, SecurityConfig, TimeoutConfig
from ..logging.config import LogFormat, LoggingConfig, LogLevel
from .profiles import ProfileType, get_env_file_path
from .validator import EngineSettings


def load_from_env(
    profile: Optional[ProfileType] = None,
    env_file: Optional[str] = None,
    **overrides: Any
) -> EngineConfig:
    """
    Build EngineConfig from the environment.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (same names as EngineSettings fields)
    2. Environment variables (REST_QUERY_*)
    3. .env file (profile-specific or default)
    4. Defaults

    Raises:
        pydantic.ValidationError: Invalid value in the environment or overrides

    Example:
        >>> config = load_from_env(profile="production", timeout_read=60)
    """
    if env_file is None:
        env_file = get_env_file_path(profile)

    settings = EngineSettings(_env_file=env_file)
    if overrides:
        # Re-validate so overrides get the same checks as env values
        settings = EngineSettings.model_validate({**settings.model_dump(), **overrides})

    timeout = settings.to_timeout_settings()
    pool = settings.to_pool_settings()
    security = settings.to_security_settings()

    logging_config = None
    logging_settings = settings.to_logging_settings()
    if logging_settings is not None:
        logging_config = LoggingConfig(
            level=LogLevel(logging_settings.level),
            format=LogFormat(logging_settings.format),
            enable_console=logging_settings.enable_console,
            enable_file=logging_settings.enable_file,
            file_path=logging_settings.file_path,
            max_bytes=logging_settings.max_bytes,
            backup_count=logging_settings.backup_count,
            enable_correlation_id=logging_settings.enable_correlation_id,
            log_attempts=logging_settings.log_attempts,
        )

    return EngineConfig(
        timeout=TimeoutConfig(
            connect=timeout.connect,
            read=timeout.read,
            write=timeout.write,
            pool=timeout.pool,
        ),
        pool=PoolConfig(
            max_concurrency=pool.max_concurrency,
            max_connections=pool.max_connections,
            max_keepalive_connections=pool.max_keepalive_connections,
        ),
        security=SecurityConfig(
            max_response_size=security.max_response_size,
            verify_ssl=security.verify_ssl,
        ),
        max_redirects=settings.max_redirects,
        response_data_type_header=settings.response_data_type_header,
        logging=logging_config,
    )


def config_summary(config: EngineConfig) -> str:
    """
    Human-readable summary (no secrets are part of EngineConfig).

    Example:
        >>> print(config_summary(load_from_env()))
        EngineConfig:
          timeout: connect=5.0s, read=30.0s, write=30.0s
          ...
    """
    lines = [
        "EngineConfig:",
        f"  timeout: connect={config.timeout.connect}s, read={config.timeout.read}s, write={config.timeout.write}s",
        f"  pool: max_concurrency={config.pool.max_concurrency}, max_connections={config.pool.max_connections}",
        f"  security: verify_ssl={config.security.verify_ssl}, max_response_size={config.security.max_response_size}",
        f"  max_redirects: {config.max_redirects}",
    ]
    if config.logging:
        lines.append(f"  logging: level={config.logging.level.value}, format={config.logging.format.value}")
        if config.logging.enable_file:
            lines.append(f"    file: {config.logging.file_path}")
    return "\n".join(lines)
