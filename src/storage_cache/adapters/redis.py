"""Redis storage adapter."""

from __future__ import annotations

import json
from typing import Any


def _decode(data: bytes | str) -> Any:
    """Deserialize a stored JSON blob."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return json.loads(data)


class AsyncRedisAdapter:
    """Async Redis storage adapter storing each blob as a JSON string."""

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        prefix: str = "storage",
    ) -> None:
        self._client = client
        self._prefix = prefix

    def _redis_key(self, key: str) -> str:
        """Generate full Redis key."""
        return f"{self._prefix}:{key}"

    def _strip(self, redis_key: bytes | str) -> str:
        if isinstance(redis_key, bytes):
            redis_key = redis_key.decode("utf-8")
        return redis_key[len(self._prefix) + 1 :]

    async def get(self, key: str) -> Any | None:
        """Get the blob stored under key, or None."""
        data = await self._client.get(self._redis_key(key))
        if data is None:
            return None
        return _decode(data)

    async def get_all(self) -> dict[str, Any]:
        """Get every blob under this adapter's prefix."""
        keys = await self.list_keys()
        if not keys:
            return {}
        values = await self._client.mget([self._redis_key(key) for key in keys])
        # Keys can disappear between SCAN and MGET
        return {
            key: _decode(value)
            for key, value in zip(keys, values, strict=True)
            if value is not None
        }

    async def set(self, key: str, value: Any) -> None:
        """Store a blob."""
        await self._client.set(self._redis_key(key), json.dumps(value))

    async def remove(self, keys: str | list[str]) -> None:
        """Remove one or more keys."""
        if isinstance(keys, str):
            keys = [keys]
        if keys:
            await self._client.delete(*(self._redis_key(key) for key in keys))

    async def list_keys(self) -> list[str]:
        """List every key under this adapter's prefix."""
        # Use SCAN to avoid blocking the server the way KEYS would
        cursor: int = 0
        pattern = f"{self._prefix}:*"
        found: list[str] = []
        while True:
            result = await self._client.scan(cursor, match=pattern, count=100)
            cursor = result[0]
            found.extend(self._strip(key) for key in result[1])
            if cursor == 0:
                break
        return found

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
