"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from infrastructure.observability.context import ObservationContext


class ConnectionProbe(Protocol):
    """Domain probe for database connection observability.

    This probe captures domain-significant events related to the cached
    database connection without exposing logging implementation details.
    """

    def connection_attempt_started(self, uri: str, max_pool_size: int) -> None:
        """Record that a new connection attempt was started."""
        ...

    def connection_attempt_joined(self) -> None:
        """Record that a caller joined an attempt already in flight."""
        ...

    def connection_attempt_rejected(self) -> None:
        """Record that a caller was turned away while an attempt was in flight."""
        ...

    def connection_established(self, uri: str, database: str) -> None:
        """Record that a database connection was successfully established."""
        ...

    def connection_reused(self) -> None:
        """Record that a cached connection was handed out without I/O."""
        ...

    def connection_failed(self, uri: str, error: Exception) -> None:
        """Record that a database connection attempt failed."""
        ...

    def connection_closed(self) -> None:
        """Record that the cached database connection was closed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultConnectionProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionProbe(logger=self._logger, context=context)

    def connection_attempt_started(self, uri: str, max_pool_size: int) -> None:
        self._logger.info(
            "database_connection_attempt_started",
            uri=uri,
            max_pool_size=max_pool_size,
            **self._get_context_kwargs(),
        )

    def connection_attempt_joined(self) -> None:
        self._logger.debug(
            "database_connection_attempt_joined",
            **self._get_context_kwargs(),
        )

    def connection_attempt_rejected(self) -> None:
        self._logger.warning(
            "database_connection_attempt_rejected",
            **self._get_context_kwargs(),
        )

    def connection_established(self, uri: str, database: str) -> None:
        self._logger.info(
            "database_connection_established",
            uri=uri,
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_reused(self) -> None:
        self._logger.debug(
            "database_connection_reused",
            **self._get_context_kwargs(),
        )

    def connection_failed(self, uri: str, error: Exception) -> None:
        self._logger.error(
            "database_connection_failed",
            uri=uri,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def connection_closed(self) -> None:
        self._logger.info(
            "database_connection_closed",
            **self._get_context_kwargs(),
        )
