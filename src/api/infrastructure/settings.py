"""Application settings using pydantic-settings.

Settings are loaded from environment variables (and an optional ``.env``
file). The MongoDB connection URI has no default: a process without one
fails at startup instead of on its first request.
"""

from functools import lru_cache
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pymongo.errors import PyMongoError
from pymongo.uri_parser import parse_uri

from infrastructure.database.exceptions import DatabaseConfigurationError

MONGODB_SCHEMES = ("mongodb", "mongodb+srv")


class DatabaseSettings(BaseSettings):
    """MongoDB connection settings.

    Environment variables:
        MONGODB_URI: Connection string (required)
        MONGODB_DATABASE_NAME: Database to use (default: the one named in the URI)
        MONGODB_MAX_POOL_SIZE: Maximum connections in the driver pool (default: 10)
        MONGODB_BUFFER_COMMANDS: Queue operations issued before the
            connection is ready instead of rejecting them (default: true)
        MONGODB_SERVER_SELECTION_TIMEOUT_MS: How long buffered operations
            wait for a server (default: 30000)
    """

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: SecretStr = Field(description="MongoDB connection string")
    database_name: str | None = Field(
        default=None,
        description="Database name, overrides the default database in the URI",
    )
    max_pool_size: int = Field(
        default=10,
        description="Maximum connections in the driver pool",
        ge=1,
        le=100,
    )
    buffer_commands: bool = Field(
        default=True,
        description="Queue operations until the connection is ready",
    )
    server_selection_timeout_ms: int = Field(
        default=30000,
        description="Server selection timeout in milliseconds",
        ge=1,
        le=300000,
    )

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, value: SecretStr) -> SecretStr:
        """Reject blank, non-MongoDB and malformed connection strings."""
        raw = value.get_secret_value().strip()
        if not raw:
            raise ValueError("MONGODB_URI must not be empty")
        scheme = urlsplit(raw).scheme
        if scheme not in MONGODB_SCHEMES:
            raise ValueError(
                f"MONGODB_URI must start with one of {MONGODB_SCHEMES}, got {scheme!r}"
            )
        if scheme == "mongodb":
            # mongodb+srv is left to the driver: parsing it resolves DNS
            try:
                parse_uri(raw)
            except (PyMongoError, ValueError) as e:
                raise ValueError(f"MONGODB_URI is malformed: {e}") from e
        return SecretStr(raw)

    @property
    def redacted_uri(self) -> str:
        """Connection string without credentials (safe for logging)."""
        parts = urlsplit(self.uri.get_secret_value())
        host = parts.netloc.rsplit("@", 1)[-1]
        return urlunsplit((parts.scheme, host, parts.path, "", ""))


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tether API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def load_database_settings() -> DatabaseSettings:
    """Load database settings from the environment.

    Raises:
        DatabaseConfigurationError: If MONGODB_URI is missing or invalid.
    """
    try:
        return DatabaseSettings()
    except ValidationError as e:
        raise DatabaseConfigurationError(
            f"Invalid MongoDB configuration, please define MONGODB_URI: {e}"
        ) from e


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Failures are not cached, so a fixed environment can be picked up
    on the next call.
    """
    return load_database_settings()
