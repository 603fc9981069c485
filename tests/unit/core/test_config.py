"""
Tests for engine configuration.
"""

import dataclasses

import httpx
import pytest

from rest_query_engine.core.config import (
    MAX_REDIRECTS,
    RESPONSE_DATA_TYPE_HEADER,
    EngineConfig,
    PoolConfig,
    SecurityConfig,
    TimeoutConfig,
)


class TestTimeoutConfig:
    """Test TimeoutConfig."""

    def test_defaults(self):
        config = TimeoutConfig()
        assert (config.connect, config.read, config.write, config.pool) == (5.0, 30.0, 30.0, None)

    @pytest.mark.parametrize("kwargs", [
        {"connect": 0},
        {"read": -1},
        {"write": 0},
        {"pool": 0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            TimeoutConfig(**kwargs)

    def test_as_httpx(self):
        timeout = TimeoutConfig(connect=3, read=60, write=10, pool=2).as_httpx()
        assert isinstance(timeout, httpx.Timeout)
        assert timeout.connect == 3
        assert timeout.read == 60
        assert timeout.write == 10
        assert timeout.pool == 2


class TestPoolConfig:
    """Test PoolConfig."""

    def test_defaults(self):
        config = PoolConfig()
        assert config.max_concurrency == 32
        assert config.max_connections == 100

    def test_validation(self):
        with pytest.raises(ValueError):
            PoolConfig(max_concurrency=0)
        with pytest.raises(ValueError):
            PoolConfig(max_keepalive_connections=-1)

    def test_as_httpx_limits(self):
        limits = PoolConfig(max_connections=10, max_keepalive_connections=2).as_httpx_limits()
        assert limits.max_connections == 10
        assert limits.max_keepalive_connections == 2


class TestSecurityConfig:
    """Test SecurityConfig."""

    def test_defaults(self):
        config = SecurityConfig()
        assert config.max_response_size == 10 * 1024 * 1024
        assert config.verify_ssl is True

    def test_validation(self):
        with pytest.raises(ValueError):
            SecurityConfig(max_response_size=0)


class TestEngineConfig:
    """Test EngineConfig."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.max_redirects == MAX_REDIRECTS == 5
        assert config.response_data_type_header == RESPONSE_DATA_TYPE_HEADER
        assert config.logging is None

    def test_immutable(self):
        config = EngineConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.max_redirects = 10

    def test_validation(self):
        with pytest.raises(ValueError):
            EngineConfig(max_redirects=0)
        with pytest.raises(ValueError):
            EngineConfig(response_data_type_header="  ")

    def test_create_with_number(self):
        config = EngineConfig.create(timeout=60)
        assert config.timeout.read == 60
        assert config.timeout.connect == 5

    def test_create_with_tuple(self):
        config = EngineConfig.create(timeout=(3, 45))
        assert config.timeout.connect == 3
        assert config.timeout.read == 45

    def test_create_with_separate_timeouts(self):
        config = EngineConfig.create(connect_timeout=2, read_timeout=20)
        assert config.timeout.connect == 2
        assert config.timeout.read == 20

    def test_create_pool_and_security(self):
        config = EngineConfig.create(
            max_concurrency=4,
            max_connections=8,
            max_response_size=1024,
            verify_ssl=False,
            max_redirects=3,
        )
        assert config.pool.max_concurrency == 4
        assert config.pool.max_connections == 8
        assert config.security.max_response_size == 1024
        assert config.security.verify_ssl is False
        assert config.max_redirects == 3

    def test_with_timeout(self):
        config = EngineConfig()
        new_config = config.with_timeout(90)
        assert new_config.timeout.read == 90
        assert config.timeout.read == 30

    def test_with_max_response_size(self):
        config = EngineConfig.create(verify_ssl=False)
        new_config = config.with_max_response_size(512)
        assert new_config.security.max_response_size == 512
        assert new_config.security.verify_ssl is False
