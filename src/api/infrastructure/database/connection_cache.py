"""Process-wide cache for the MongoDB connection.

Serverless and hot-reloading hosts call into the application many times per
process. ``ConnectionCache`` makes sure those calls share one connection
(and one driver pool) instead of dialing the database per invocation.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Protocol

from pymongo.errors import PyMongoError

from infrastructure.database.connector import MongoConnection, MongoConnector
from infrastructure.database.exceptions import (
    DatabaseConfigurationError,
    DatabaseConnectionError,
)
from infrastructure.database.once_cell import AsyncOnceCell
from infrastructure.observability.probes import (
    ConnectionProbe,
    DefaultConnectionProbe,
)

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext
    from infrastructure.settings import DatabaseSettings


class Connector(Protocol):
    """Anything that can dial a new MongoConnection."""

    async def connect(self) -> MongoConnection: ...


class CacheState(enum.Enum):
    EMPTY = "empty"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionCache:
    """Lazily connects to MongoDB once and hands out the same connection.

    State machine: EMPTY -> CONNECTING -> CONNECTED. A failed attempt goes
    back to EMPTY so a later call can retry; CONNECTED lasts until
    ``close()``. Drops detected by the driver itself are left to the driver.

    Intended to be owned by the host (see ``main.tether_lifespan``) and
    passed to whatever needs a connection.

    Example:
        cache = ConnectionCache(get_database_settings())
        connection = await cache.get_connection()
        await connection.database["events"].insert_one({"kind": "ping"})
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        connector: Connector | None = None,
        probe: ConnectionProbe | None = None,
    ):
        """Initialize the cache.

        Args:
            settings: Database connection settings
            connector: Connect operation to use (default: MongoConnector)
            probe: Optional observability probe

        Raises:
            DatabaseConfigurationError: If no connection URI is configured.
        """
        if not settings.uri.get_secret_value().strip():
            raise DatabaseConfigurationError("Please define MONGODB_URI")

        self._settings = settings
        self._connector = connector or MongoConnector(settings)
        self._probe = probe or DefaultConnectionProbe()
        self._cell: AsyncOnceCell[MongoConnection] = AsyncOnceCell()

    @property
    def state(self) -> CacheState:
        if self._cell.has_value:
            return CacheState.CONNECTED
        if self._cell.is_pending:
            return CacheState.CONNECTING
        return CacheState.EMPTY

    def is_connected(self) -> bool:
        return self._cell.has_value

    async def get_connection(
        self, context: ObservationContext | None = None
    ) -> MongoConnection:
        """Return the shared connection, connecting first if needed.

        Concurrent callers that arrive while a connection attempt is in
        flight wait for that attempt; a second one is never started. With
        command buffering disabled they are turned away instead.

        Args:
            context: Optional request metadata bound to the events this
                call records.

        Returns:
            The cached MongoConnection.

        Raises:
            DatabaseConnectionError: If the attempt this call waited on
                failed (the driver error is the ``__cause__`` and the cache
                is empty again, so the next call retries), or if buffering
                is disabled and the connection is not ready yet.
        """
        probe = self._probe
        if context is not None:
            probe = probe.with_context(context)

        connection = self._cell.value
        if connection is not None:
            probe.connection_reused()
            return connection

        if self._cell.is_pending:
            if not self._settings.buffer_commands:
                probe.connection_attempt_rejected()
                raise DatabaseConnectionError(
                    DatabaseConnectionError.NOT_READY_MESSAGE
                )
            probe.connection_attempt_joined()

        return await self._cell.get_or_init(lambda: self._connect(probe))

    async def close(self) -> None:
        """Close the cached connection and return to EMPTY.

        An attempt still in flight is cancelled. Safe to call repeatedly.
        """
        connection = self._cell.reset()
        if connection is not None:
            connection.close()
            self._probe.connection_closed()

    async def _connect(self, probe: ConnectionProbe) -> MongoConnection:
        """Run one connection attempt (shared by all waiting callers)."""
        uri = self._settings.redacted_uri
        probe.connection_attempt_started(
            uri=uri,
            max_pool_size=self._settings.max_pool_size,
        )
        try:
            connection = await self._connector.connect()
        except (PyMongoError, ValueError) as e:
            # pymongo reports some malformed URIs (bad port, unescaped "@")
            # as plain ValueError
            probe.connection_failed(uri=uri, error=e)
            raise DatabaseConnectionError() from e

        probe.connection_established(
            uri=uri,
            database=connection.database_name,
        )
        return connection
