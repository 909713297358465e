"""Shared infrastructure dependencies.

Provides the process-wide connection cache and the FastAPI dependency
providers built on it.
"""

from __future__ import annotations

import threading
from typing import Annotated

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from infrastructure.database.connection_cache import ConnectionCache
from infrastructure.database.connector import MongoConnector
from infrastructure.settings import get_database_settings, get_settings

# Module-level cache instance (created on first use)
_connection_cache: ConnectionCache | None = None

# Thread lock for safe cache initialization
_cache_lock = threading.Lock()


def get_connection_cache() -> ConnectionCache:
    """Get the process-wide connection cache (singleton).

    Creates the cache on first call and returns the same instance after
    that. Uses double-check locking so threaded hosts never build two
    caches (and so never run two connection attempts).

    Serverless handlers with no lifespan hook call this directly.

    Raises:
        DatabaseConfigurationError: If MONGODB_URI is missing or invalid.
    """
    global _connection_cache
    if _connection_cache is None:
        with _cache_lock:
            # Double-check after acquiring lock
            if _connection_cache is None:
                settings = get_database_settings()
                connector = MongoConnector(
                    settings, app_name=get_settings().app_name
                )
                _connection_cache = ConnectionCache(settings, connector=connector)
    return _connection_cache


async def close_connection_cache() -> None:
    """Close the process-wide cache and forget it.

    Should be called on application shutdown. The next
    ``get_connection_cache()`` call builds a fresh cache.
    """
    global _connection_cache

    with _cache_lock:
        cache, _connection_cache = _connection_cache, None

    if cache is not None:
        await cache.close()


def get_request_connection_cache(request: Request) -> ConnectionCache:
    """Provide the cache owned by the running app (FastAPI dependency)."""
    return request.app.state.connection_cache


async def get_database(
    cache: Annotated[ConnectionCache, Depends(get_request_connection_cache)],
) -> AsyncIOMotorDatabase:
    """Provide the connected database (FastAPI dependency).

    Usage:
        @router.get("/events")
        async def list_events(
            db: AsyncIOMotorDatabase = Depends(get_database)
        ):
            return await db["events"].find().to_list(100)

    Raises:
        DatabaseConnectionError: If the database is unavailable.
    """
    connection = await cache.get_connection()
    return connection.database
