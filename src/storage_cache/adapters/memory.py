"""In-memory storage adapter (async only)."""

import asyncio
import copy
from typing import Any


class AsyncMemoryAdapter:
    """Async in-memory storage adapter.

    Values are deep-copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        """Get the blob stored under key, or None."""
        async with self._lock:
            return copy.deepcopy(self._data.get(key))

    async def get_all(self) -> dict[str, Any]:
        """Get every stored blob."""
        async with self._lock:
            return copy.deepcopy(self._data)

    async def set(self, key: str, value: Any) -> None:
        """Store a blob."""
        async with self._lock:
            self._data[key] = copy.deepcopy(value)

    async def remove(self, keys: str | list[str]) -> None:
        """Remove one or more keys."""
        if isinstance(keys, str):
            keys = [keys]
        async with self._lock:
            for key in keys:
                self._data.pop(key, None)

    async def list_keys(self) -> list[str]:
        """List every stored key."""
        async with self._lock:
            return list(self._data)

    async def disconnect(self) -> None:
        """Disconnect from the storage backend (no-op for memory)."""
        pass
