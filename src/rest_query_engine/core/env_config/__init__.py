"""
Environment configuration for the query engine.

Example:
    >>> from rest_query_engine.core.env_config import load_from_env
    >>>
    >>> config = load_from_env()                      # .env / REST_QUERY_*
    >>> config = load_from_env(profile="production")  # .env.production
    >>> config = load_from_env(timeout_read=60)       # explicit override
"""

from .loader import config_summary, load_from_env
from .profiles import ProfileConfig, ProfileType, detect_profile, get_env_file_path
from .validator import (
    EngineSettings,
    LoggingSettings,
    PoolSettings,
    SecuritySettings,
    TimeoutSettings,
)

__all__ = [
    "load_from_env",
    "config_summary",
    "EngineSettings",
    "TimeoutSettings",
    "PoolSettings",
    "SecuritySettings",
    "LoggingSettings",
    "ProfileType",
    "ProfileConfig",
    "detect_profile",
    "get_env_file_path",
]
