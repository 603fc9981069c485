"""
Tests for profile management.
"""

import pytest

from rest_query_engine.core.env_config.profiles import (
    PROFILE_ENV_VAR,
    ProfileConfig,
    detect_profile,
    get_env_file_path,
)


@pytest.fixture(autouse=True)
def no_markers(monkeypatch):
    for name in (PROFILE_ENV_VAR, "CI", "KUBERNETES_SERVICE_HOST"):
        monkeypatch.delenv(name, raising=False)


class TestGetEnvFilePath:
    """Test get_env_file_path function."""

    def test_no_profile(self):
        assert get_env_file_path(None) == ".env"

    @pytest.mark.parametrize("profile", ["development", "staging", "production"])
    def test_profiles(self, profile):
        assert get_env_file_path(profile) == f".env.{profile}"

    def test_uses_env_variable_if_profile_none(self, monkeypatch):
        """Test that REST_QUERY_ENV is used when no profile is given."""
        monkeypatch.setenv(PROFILE_ENV_VAR, "staging")
        assert get_env_file_path(None) == ".env.staging"


class TestDetectProfile:
    """Test detect_profile function."""

    def test_none(self):
        assert detect_profile() is None

    def test_from_env_variable(self, monkeypatch):
        monkeypatch.setenv(PROFILE_ENV_VAR, "production")
        assert detect_profile() == "production"

    def test_unknown_env_value_ignored(self, monkeypatch):
        monkeypatch.setenv(PROFILE_ENV_VAR, "qa")
        assert detect_profile() is None

    def test_ci(self, monkeypatch):
        monkeypatch.setenv("CI", "true")
        assert detect_profile() == "staging"

    def test_kubernetes(self, monkeypatch):
        monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
        assert detect_profile() == "production"


class TestProfileConfig:
    """Test ProfileConfig class."""

    def test_explicit_profile(self):
        config = ProfileConfig(profile="staging")
        assert config.profile == "staging"
        assert config.env_file == ".env.staging"
        assert "staging" in repr(config)

    def test_invalid_profile(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            ProfileConfig(profile="qa")

    def test_load(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env.development").write_text("REST_QUERY_TIMEOUT_READ=42\n")

        settings = ProfileConfig(profile="development").load()
        assert settings.timeout_read == 42
