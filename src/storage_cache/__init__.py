"""storage_cache - time-bounded values and self-refreshing cached functions."""

from contextlib import suppress

# Adapters (async only)
from storage_cache.adapters import (
    AsyncKeyListingAdapter,
    AsyncMemoryAdapter,
    AsyncStorageAdapter,
)

# Cached functions and values
from storage_cache.cached_function import (
    CachedFunction,
    cached_function,
    create_cached_function,
)
from storage_cache.cached_value import CachedValue
from storage_cache.config import CachedFunctionConfig

# Duration parsing
from storage_cache.duration import parse_duration
from storage_cache.engine import CacheEngine
from storage_cache.errors import (
    CacheError,
    InvalidArgumentError,
    InvalidEntryError,
    NoUpdaterConfiguredError,
)
from storage_cache.keys import derive_key, json_cache_key
from storage_cache.sweeper import (
    AsyncIOSchedulerHost,
    ExpirationSweeper,
    Scheduler,
    initialize_sweeper,
)

# Core types
from storage_cache.types import CacheEntry, CacheValue, Duration

# Optional adapter imports - only available when dependencies are installed
with suppress(ImportError):
    from storage_cache.adapters import AsyncRedisAdapter

__version__ = "0.1.0"

__all__ = [
    "AsyncIOSchedulerHost",
    "AsyncKeyListingAdapter",
    "AsyncMemoryAdapter",
    "AsyncRedisAdapter",
    "AsyncStorageAdapter",
    "CacheEngine",
    "CacheEntry",
    "CacheError",
    "CacheValue",
    "CachedFunction",
    "CachedFunctionConfig",
    "CachedValue",
    "Duration",
    "ExpirationSweeper",
    "InvalidArgumentError",
    "InvalidEntryError",
    "NoUpdaterConfiguredError",
    "Scheduler",
    "cached_function",
    "create_cached_function",
    "derive_key",
    "initialize_sweeper",
    "json_cache_key",
    "parse_duration",
]
