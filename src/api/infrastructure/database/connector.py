"""MongoDB connect operation.

This module builds a Motor client with the fixed connect options and
verifies it against the server. It does not cache anything; see
``ConnectionCache`` for that.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
)

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

# Driver default when neither the settings nor the URI name a database
DEFAULT_DATABASE_NAME = "test"


@dataclass(frozen=True)
class MongoConnection:
    """Live handle to the database, obtained from the driver.

    The driver pool behind ``client`` is shared by every holder of the
    handle; closing it closes it for all of them.
    """

    client: AsyncIOMotorClient
    database: AsyncIOMotorDatabase

    @property
    def database_name(self) -> str:
        return self.database.name

    async def ping(self) -> bool:
        """Check that the server answers.

        Returns:
            True if the server acknowledged the ping.
        """
        result = await self.client.admin.command("ping")
        return bool(result.get("ok"))

    def close(self) -> None:
        """Close the client and its connection pool."""
        self.client.close()


class MongoConnector:
    """Creates verified MongoDB connections.

    Each call to ``connect`` dials a new client; callers that want reuse
    go through ``ConnectionCache``.
    """

    def __init__(self, settings: DatabaseSettings, app_name: str | None = None):
        """Initialize the connector.

        Args:
            settings: Database connection settings
            app_name: Optional application name reported to the server
        """
        self._settings = settings
        self._app_name = app_name

    def client_options(self) -> dict[str, Any]:
        """Keyword options passed to the Motor client."""
        options: dict[str, Any] = {
            "maxPoolSize": self._settings.max_pool_size,
            # Also bounds the verification ping in connect()
            "serverSelectionTimeoutMS": self._settings.server_selection_timeout_ms,
        }
        if self._app_name:
            options["appname"] = self._app_name
        return options

    async def connect(self) -> MongoConnection:
        """Dial the server and return a verified connection handle.

        Returns:
            A MongoConnection whose server answered a ping.

        Raises:
            PyMongoError: If the client cannot be created or the server
                does not answer. The half-built client is closed first.
            ValueError: For URIs pymongo rejects before dialing (for
                example an out-of-range port).
        """
        client = AsyncIOMotorClient(
            self._settings.uri.get_secret_value(),
            **self.client_options(),
        )
        try:
            await client.admin.command("ping")
            database = self._resolve_database(client)
        except BaseException:
            client.close()
            raise

        return MongoConnection(client=client, database=database)

    def _resolve_database(self, client: AsyncIOMotorClient) -> AsyncIOMotorDatabase:
        if self._settings.database_name:
            return client[self._settings.database_name]
        return client.get_default_database(default=DEFAULT_DATABASE_NAME)


__all__ = [
    "MongoConnection",
    "MongoConnector",
]
