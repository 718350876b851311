"""Cache engine - time-bounded values on top of a storage adapter.

Provides:
- get(), set(), has(), delete(): single-key operations
- clear(), delete_expired(): whole-namespace operations
- read_entry(): raw read exposing the stored expiry, used for SWR
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, TypeVar

from storage_cache.adapters.base import AsyncKeyListingAdapter, AsyncStorageAdapter
from storage_cache.codec import (
    DEFAULT_PREFIX,
    decode_entry,
    encode_entry,
    is_storage_key,
    storage_key,
)
from storage_cache.config import DEFAULT_MAX_AGE, parse_duration_option
from storage_cache.errors import InvalidArgumentError, InvalidEntryError
from storage_cache.types import MISSING, CacheEntry, Duration

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    """Current time as a Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


class CacheEngine:
    """Time-bounded cache over an async storage adapter.

    Every key passed in is a logical name; the adapter sees it as
    ``<prefix>:<name>``. Adapter errors propagate unchanged.
    """

    def __init__(
        self,
        adapter: AsyncStorageAdapter,
        *,
        prefix: str = DEFAULT_PREFIX,
        default_max_age: Duration = DEFAULT_MAX_AGE,
    ) -> None:
        if not prefix:
            raise InvalidArgumentError("prefix must be a non-empty string")
        self._adapter = adapter
        self._prefix = prefix
        self._default_max_age = parse_duration_option(
            "default_max_age", default_max_age
        )

    @property
    def adapter(self) -> AsyncStorageAdapter:
        return self._adapter

    @property
    def prefix(self) -> str:
        return self._prefix

    async def has(self, key: str) -> bool:
        """Check whether a non-expired entry exists."""
        return await self.read_entry(key, remove_if_expired=False) is not None

    async def get(self, key: str) -> Any | None:
        """Get a value, removing the entry if it has expired."""
        entry = await self.read_entry(key, remove_if_expired=True)
        if entry is None:
            return None
        return entry.data

    async def set(
        self,
        key: str,
        value: T = MISSING,
        max_age: Duration | None = None,
    ) -> T:
        """Store a value for max_age (default: engine default).

        Setting None deletes the key. Omitting the value is an error so a
        missing argument never clears an entry by accident.
        """
        if value is MISSING:
            raise InvalidArgumentError("Expected a value as the second argument")

        if value is None:
            await self.delete(key)
            return value

        if max_age is None:
            ttl = self._default_max_age
        else:
            ttl = parse_duration_option("max_age", max_age)
        entry: CacheEntry[T] = CacheEntry(data=value, expires_at=now_ms() + ttl)
        await self._adapter.set(storage_key(key, self._prefix), encode_entry(entry))
        return value

    async def delete(self, key: str) -> None:
        """Delete an entry. Missing keys are ignored."""
        await self._adapter.remove(storage_key(key, self._prefix))

    async def clear(self) -> None:
        """Delete every entry in the cache namespace, expired or not."""
        if isinstance(self._adapter, AsyncKeyListingAdapter):
            keys = await self._namespace_keys(self._adapter)
        else:
            keys = list(await self._read_namespace())
        await self._remove_many(keys)

    async def delete_expired(self) -> int:
        """Delete entries whose expiry has passed. Returns how many were removed."""
        blobs = await self._read_namespace()
        now = now_ms()
        removable: list[str] = []
        for key, blob in blobs.items():
            try:
                entry = decode_entry(blob)
            except InvalidEntryError:
                logger.warning("Removing undecodable cache entry %s", key)
                removable.append(key)
                continue
            if now > entry.expires_at:
                removable.append(key)
        await self._remove_many(removable)
        return len(removable)

    async def read_entry(
        self,
        key: str,
        *,
        remove_if_expired: bool,
    ) -> CacheEntry[Any] | None:
        """Read the entry for key, treating expired entries as missing.

        Unlike get(), this exposes ``expires_at`` so callers can tell how
        close the entry is to its horizon.
        """
        internal_key = storage_key(key, self._prefix)
        blob = await self._adapter.get(internal_key)
        if blob is None:
            return None

        try:
            entry = decode_entry(blob)
        except InvalidEntryError:
            logger.warning("Ignoring undecodable cache entry %s", internal_key)
            if remove_if_expired:
                await self._adapter.remove(internal_key)
            return None

        if now_ms() > entry.expires_at:
            if remove_if_expired:
                await self._adapter.remove(internal_key)
            return None
        return entry

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    async def _read_namespace(self) -> dict[str, Any]:
        """Fetch every blob in the cache namespace."""
        if isinstance(self._adapter, AsyncKeyListingAdapter):
            keys = await self._namespace_keys(self._adapter)
            blobs = await asyncio.gather(*(self._adapter.get(key) for key in keys))
            # Entries removed between listing and reading are skipped
            return {
                key: blob for key, blob in zip(keys, blobs, strict=True) if blob is not None
            }

        return {
            key: blob
            for key, blob in (await self._adapter.get_all()).items()
            if is_storage_key(key, self._prefix)
        }

    async def _namespace_keys(self, adapter: AsyncKeyListingAdapter) -> list[str]:
        return [
            key for key in await adapter.list_keys() if is_storage_key(key, self._prefix)
        ]

    async def _remove_many(self, keys: list[str]) -> None:
        if keys:
            await self._adapter.remove(keys)
