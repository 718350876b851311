"""Per-key coalescing of concurrent computations (stampede protection)."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class InFlightRequests:
    """Tracks at most one pending computation per key.

    The check and the registration in run() happen without awaiting, so two
    callers on the same event loop can never both start a computation for
    the same key. A task is dropped from the map as soon as it settles.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[Any]] = {}

    def __contains__(self, key: str) -> bool:
        return self.pending(key) is not None

    def __len__(self) -> int:
        return sum(1 for task in self._pending.values() if not task.done())

    def pending(self, key: str) -> asyncio.Task[Any] | None:
        """Return the unsettled task for key, if any."""
        task = self._pending.get(key)
        if task is None or task.done():
            return None
        return task

    def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Return the pending task for key, or start one from factory."""
        existing = self.pending(key)
        if existing is not None:
            return existing

        task: asyncio.Task[T] = asyncio.ensure_future(factory())
        self._pending[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return task

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        # A newer task may already own the key
        if self._pending.get(key) is task:
            del self._pending[key]
        # Every waiter may have gone away; the failure still reaches any
        # caller that awaits the task
        if not task.cancelled():
            task.exception()
