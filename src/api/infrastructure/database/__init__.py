"""Database infrastructure - cached MongoDB connection primitives."""

from infrastructure.database.connection_cache import CacheState, ConnectionCache
from infrastructure.database.connector import MongoConnection, MongoConnector
from infrastructure.database.exceptions import (
    DatabaseConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
)

__all__ = [
    "CacheState",
    "ConnectionCache",
    "DatabaseConfigurationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "MongoConnection",
    "MongoConnector",
]
