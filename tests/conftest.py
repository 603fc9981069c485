"""
Pytest configuration and fixtures for rest-query-engine tests.
"""

import pytest

from rest_query_engine import (
    DatasourceConfig,
    EngineConfig,
    QueryConfig,
    RestApiEngine,
)
from rest_query_engine.core.logging.config import LoggingConfig
from rest_query_engine.core.worker_pool import QueryWorkerPool


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def datasource(base_url):
    """Datasource pointing at the mocked API."""
    return DatasourceConfig(url=base_url)


@pytest.fixture
def get_query():
    """Plain GET query."""
    return QueryConfig(http_method="GET", path="/users")


@pytest.fixture
def engine_config():
    """Engine config with short timeouts."""
    return EngineConfig.create(timeout=5)


@pytest.fixture
async def pool(engine_config):
    """Shared worker pool, closed after the test."""
    pool = QueryWorkerPool(engine_config)
    yield pool
    await pool.close()


@pytest.fixture
async def engine(engine_config):
    """RestApiEngine instance, closed after the test."""
    engine = RestApiEngine(engine_config)
    yield engine
    await engine.close()


@pytest.fixture
def logging_config():
    """
    LoggingConfig fixture for testing.

    Example:
        def test_with_logging(logging_config):
            engine = RestApiEngine(EngineConfig.create(logging=logging_config))
    """
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove REST_QUERY_* environment variables before each test."""
    import os
    for key in list(os.environ):
        if key.startswith("REST_QUERY_"):
            monkeypatch.delenv(key, raising=False)
