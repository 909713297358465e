"""Single-slot holder for a lazily initialised async value.

The cell holds either a settled value or the one task currently producing
it. Callers that arrive while the task is running await that same task,
so initialisation is de-duplicated rather than repeated per caller.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

T = TypeVar("T")


class AsyncOnceCell(Generic[T]):
    """Value-or-pending cell for cooperative (single event loop) code.

    No lock is taken: the check-and-start sequence in ``get_or_init`` has no
    suspension point, so only one task can observe the cell as empty.

    A failed or cancelled initialisation leaves the cell empty, and the next
    ``get_or_init`` call starts a fresh attempt.
    """

    def __init__(self) -> None:
        self._value: T | None = None
        self._has_value = False
        self._pending: asyncio.Task[T] | None = None

    @property
    def has_value(self) -> bool:
        return self._has_value

    @property
    def value(self) -> T | None:
        """The settled value, or None while the cell is empty or pending."""
        return self._value

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    async def get_or_init(self, factory: Callable[[], Awaitable[T]]) -> T:
        """Return the cell's value, initialising it with ``factory`` if needed.

        Args:
            factory: Zero-argument coroutine function. Called at most once
                per empty-to-settled cycle.

        Returns:
            The settled value shared by every caller of the same attempt.

        Raises:
            Exception: Whatever ``factory`` raised. Every caller that was
                waiting on the attempt receives the same exception.
        """
        if self._has_value:
            return self._value  # type: ignore[return-value]

        if self._pending is None:
            self._pending = asyncio.ensure_future(factory())
            # Registered before any waiter, so it runs before they resume
            self._pending.add_done_callback(self._settle)

        # Shielded: one cancelled caller must not cancel the shared attempt
        return await asyncio.shield(self._pending)

    def reset(self) -> T | None:
        """Empty the cell, cancelling an in-flight attempt.

        Returns:
            The value the cell held (including one produced by an attempt
            that finished but has not settled yet), so the caller can
            release it. None if there was nothing to release.
        """
        pending, self._pending = self._pending, None
        value = self._value if self._has_value else None
        self._value = None
        self._has_value = False

        if pending is not None:
            if not pending.done():
                pending.cancel()
            elif not pending.cancelled() and pending.exception() is None:
                value = pending.result()
        return value

    def _settle(self, task: asyncio.Task[T]) -> None:
        if task is not self._pending:
            # Superseded by reset()
            return
        self._pending = None
        if task.cancelled() or task.exception() is not None:
            return
        self._value = task.result()
        self._has_value = True
