"""
Profile management: development, staging, production.
"""

import os
from typing import Literal, Optional

ProfileType = Literal["development", "staging", "production"]

PROFILES = ("development", "staging", "production")
PROFILE_ENV_VAR = "REST_QUERY_ENV"


def get_env_file_path(profile: Optional[str] = None) -> str:
    """
    .env file for a profile.

    Example:
        >>> get_env_file_path("production")
        '.env.production'
        >>> get_env_file_path(None)  # REST_QUERY_ENV unset
        '.env'
    """
    if profile is None:
        profile = os.getenv(PROFILE_ENV_VAR)

    if not profile:
        return ".env"

    return f".env.{profile}"


def detect_profile() -> Optional[ProfileType]:
    """
    Profile from REST_QUERY_ENV, then from common deployment markers.

    Returns:
        Detected profile or None (use the default .env)
    """
    env = os.getenv(PROFILE_ENV_VAR)
    if env in PROFILES:
        return env

    if os.getenv("CI") == "true":
        return "staging"

    if os.getenv("KUBERNETES_SERVICE_HOST"):
        return "production"

    return None


class ProfileConfig:
    """
    Profile-bound settings loader.

    Example:
        >>> settings = ProfileConfig(profile="production").load()
    """

    def __init__(self, profile: Optional[ProfileType] = None):
        if profile is not None and profile not in PROFILES:
            raise ValueError(f"Unknown profile {profile!r}. Available: {', '.join(PROFILES)}")
        self.profile = profile or detect_profile()
        self.env_file = get_env_file_path(self.profile)

    def load(self) -> "EngineSettings":
        from .validator import EngineSettings
        return EngineSettings(_env_file=self.env_file)

    def __repr__(self) -> str:
        return f"ProfileConfig(profile={self.profile!r}, env_file={self.env_file!r})"
