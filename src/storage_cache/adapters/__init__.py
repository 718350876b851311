"""Storage adapters for storage_cache (async only)."""

from contextlib import suppress

from storage_cache.adapters.base import (
    AsyncKeyListingAdapter,
    AsyncStorageAdapter,
)
from storage_cache.adapters.memory import AsyncMemoryAdapter

# Optional adapters - only available when dependencies are installed
with suppress(ImportError):
    from storage_cache.adapters.redis import AsyncRedisAdapter

__all__ = [
    "AsyncKeyListingAdapter",
    "AsyncMemoryAdapter",
    "AsyncRedisAdapter",
    "AsyncStorageAdapter",
]
