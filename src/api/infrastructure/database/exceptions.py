"""Database-specific exceptions for the connection layer."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class DatabaseConfigurationError(DatabaseError):
    """Raised when the database connection target is missing or invalid.

    Fatal: raised at startup, before any connection attempt.
    """

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when a database connection cannot be established.

    The driver error that caused it is available as ``__cause__``.
    """

    GENERIC_MESSAGE = "Database unavailable: check the MongoDB connection settings"
    NOT_READY_MESSAGE = "Database unavailable: connection is not ready yet"

    def __init__(self, message: str = GENERIC_MESSAGE):
        super().__init__(message)
