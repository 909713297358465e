"""Integration test fixtures for MongoDB connection tests.

These fixtures require a running MongoDB instance.
Use docker compose (or any local mongod) for testing.
"""

import os

import pytest
import pytest_asyncio
from pydantic import SecretStr

from infrastructure.database.connection_cache import ConnectionCache
from infrastructure.settings import DatabaseSettings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires a running MongoDB)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        MONGODB_URI, MONGODB_DATABASE_NAME
    """
    return DatabaseSettings(
        _env_file=None,
        uri=SecretStr(os.getenv("MONGODB_URI", "mongodb://localhost:27017")),
        database_name=os.getenv("MONGODB_DATABASE_NAME", "tether_integration"),
        server_selection_timeout_ms=2000,
    )


@pytest_asyncio.fixture
async def connection_cache(integration_db_settings):
    """Provide a connection cache, skipping when MongoDB is unreachable.

    Closes the cached connection after each test.
    """
    if not os.getenv("MONGODB_URI"):
        pytest.skip("MONGODB_URI not set; integration tests need a running MongoDB")
    cache = ConnectionCache(integration_db_settings)
    yield cache
    await cache.close()
