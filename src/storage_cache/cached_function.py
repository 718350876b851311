"""Cached functions - memoized async updaters with stale-while-revalidate.

An entry is written to expire at ``now + max_age + stale_while_revalidate``.
On read, that single timestamp gives three regimes:

- fresh: ``now + stale_while_revalidate <= expires_at``, served as is
- stale: not expired but inside the SWR window, served and refreshed in
  the background
- expired/missing: the caller waits for the updater
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

from storage_cache.config import DEFAULT_MAX_AGE, CachedFunctionConfig
from storage_cache.engine import CacheEngine, now_ms
from storage_cache.errors import InvalidArgumentError, NoUpdaterConfiguredError
from storage_cache.inflight import InFlightRequests
from storage_cache.keys import derive_key
from storage_cache.types import MISSING, CacheKeyFn, Duration

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CachedFunction(Generic[T]):
    """An async updater whose results are kept in a CacheEngine.

    Usage:
        usernames = CachedFunction(
            engine,
            CachedFunctionConfig(name="username", updater=fetch_username),
        )
        name = await usernames("@anne")
        name = await usernames.fresh("@anne")  # skip the cache
    """

    def __init__(self, engine: CacheEngine, config: CachedFunctionConfig[T]) -> None:
        self._engine = engine
        self._config = config
        self._in_flight = InFlightRequests()

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> CachedFunctionConfig[T]:
        return self._config

    def key_for(self, *args: Any) -> str:
        """Logical cache key used for these arguments."""
        return derive_key(self._config.name, self._config.cache_key, args)

    async def __call__(self, *args: Any) -> T | None:
        return await self.get(*args)

    async def get(self, *args: Any) -> T | None:
        """Return the cached value, calling the updater when needed.

        Concurrent calls resolving to the same key share one computation.
        """
        key = self.key_for(*args)
        task = self._in_flight.run(key, lambda: self._memoize(key, args))
        # Shielded so one caller's cancellation does not cancel the others
        return await asyncio.shield(task)

    async def get_cached(self, *args: Any) -> T | None:
        """Return the stored value without ever calling the updater."""
        return await self._engine.get(self.key_for(*args))

    async def get_fresh(self, *args: Any) -> T | None:
        """Call the updater and store its result, ignoring any cached value."""
        self._require_updater()
        return await self._refresh(self.key_for(*args), args)

    fresh = get_fresh

    async def apply_override(self, args: Sequence[Any], value: T = MISSING) -> T:
        """Store value as the result for args. None deletes the entry."""
        if value is MISSING:
            raise InvalidArgumentError("Expected a value to be stored")
        key = self.key_for(*args)
        if value is None:
            await self._engine.delete(key)
            return value
        return await self._engine.set(key, value, self._config.horizon_ms)

    async def delete(self, *args: Any) -> None:
        """Delete the entry for args."""
        await self._engine.delete(self.key_for(*args))

    async def is_cached(self, *args: Any) -> bool:
        """Check whether a non-expired entry exists for args."""
        return await self._engine.has(self.key_for(*args))

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _require_updater(self) -> Callable[..., Awaitable[T | None]]:
        if self._config.updater is None:
            raise NoUpdaterConfiguredError(
                f"Cannot get a fresh value for {self._config.name!r} without updater"
            )
        return self._config.updater

    async def _memoize(self, key: str, args: tuple[Any, ...]) -> T | None:
        entry = await self._engine.read_entry(key, remove_if_expired=False)
        if entry is None:
            logger.debug("Cache MISS: %s", key)
            return await self._refresh(key, args)

        should_revalidate = self._config.should_revalidate
        if should_revalidate is not None and should_revalidate(entry.data):
            logger.debug("Cache HIT (revalidation forced): %s", key)
            return await self._refresh(key, args)

        if now_ms() + self._config.stale_while_revalidate_ms > entry.expires_at:
            logger.debug("Cache HIT (stale): %s", key)
            # Next tick: by then this computation has settled and the
            # refresh can take its place in the in-flight map
            asyncio.get_running_loop().call_soon(
                self._revalidate_in_background, key, args
            )
        else:
            logger.debug("Cache HIT (fresh): %s", key)
        return entry.data

    async def _refresh(self, key: str, args: tuple[Any, ...]) -> T | None:
        updater = self._require_updater()
        value = await updater(*args)
        if value is None:
            await self._engine.delete(key)
            return None
        return await self._engine.set(key, value, self._config.horizon_ms)

    def _revalidate_in_background(self, key: str, args: tuple[Any, ...]) -> None:
        if key in self._in_flight:
            # Someone else is already computing this key
            return
        task = self._in_flight.run(key, lambda: self._refresh(key, args))
        task.add_done_callback(functools.partial(self._log_background_result, key))

    @staticmethod
    def _log_background_result(key: str, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            logger.debug("Background refresh cancelled: %s", key)
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                "Background refresh failed for %s: %s", key, error, exc_info=error
            )
        else:
            logger.debug("Background refresh complete: %s", key)


def create_cached_function(
    engine: CacheEngine,
    name: str,
    updater: Callable[..., Awaitable[T | None]] | None = None,
    *,
    max_age: Duration = DEFAULT_MAX_AGE,
    stale_while_revalidate: Duration = 0,
    cache_key: CacheKeyFn | None = None,
    should_revalidate: Callable[[T], bool] | None = None,
) -> CachedFunction[T]:
    """Create a cached function.

    Args:
        engine: Cache engine holding the entries
        name: Cache name, used as the key prefix for every call
        updater: Async function producing fresh values; None result deletes
        max_age: How long a value is fresh
        stale_while_revalidate: Extra time a value is served while refreshing
        cache_key: Builds the key suffix from the argument list
        should_revalidate: Forces a refresh when it returns True for a value

    Returns:
        CachedFunction with get, get_cached, get_fresh, apply_override,
        delete and is_cached
    """
    config: CachedFunctionConfig[T] = CachedFunctionConfig(
        name=name,
        updater=updater,
        max_age=max_age,
        stale_while_revalidate=stale_while_revalidate,
        cache_key=cache_key,
        should_revalidate=should_revalidate,
    )
    return CachedFunction(engine, config)


def cached_function(
    engine: CacheEngine,
    *,
    name: str | None = None,
    max_age: Duration = DEFAULT_MAX_AGE,
    stale_while_revalidate: Duration = 0,
    cache_key: CacheKeyFn | None = None,
    should_revalidate: Callable[[Any], bool] | None = None,
) -> Callable[[Callable[..., Awaitable[T | None]]], CachedFunction[T]]:
    """Decorator turning an async function into a CachedFunction.

    Usage:
        @cached_function(engine, max_age="1d", stale_while_revalidate="29d")
        async def get_username(handle: str) -> str:
            return await fetch_username(handle)

    The cache name defaults to the function's qualified name.
    """

    def decorator(fn: Callable[..., Awaitable[T | None]]) -> CachedFunction[T]:
        cached: CachedFunction[T] = create_cached_function(
            engine,
            name or fn.__qualname__,
            fn,
            max_age=max_age,
            stale_while_revalidate=stale_while_revalidate,
            cache_key=cache_key,
            should_revalidate=should_revalidate,
        )
        functools.update_wrapper(cached, fn)
        return cached

    return decorator


__all__ = ["CachedFunction", "cached_function", "create_cached_function"]
