"""A single named value in the cache."""

from __future__ import annotations

from typing import Generic, TypeVar

from storage_cache.config import DEFAULT_MAX_AGE, parse_duration_option
from storage_cache.engine import CacheEngine
from storage_cache.errors import InvalidArgumentError
from storage_cache.types import MISSING, Duration

T = TypeVar("T")


class CachedValue(Generic[T]):
    """A value stored under one fixed name.

    Usage:
        token = CachedValue(engine, "token", max_age="1h")
        await token.set("abc")
        await token.get()  # "abc" until the hour is up
    """

    def __init__(
        self,
        engine: CacheEngine,
        name: str,
        *,
        max_age: Duration = DEFAULT_MAX_AGE,
    ) -> None:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("name must be a non-empty string")
        self._engine = engine
        self._name = name
        self._max_age = parse_duration_option("max_age", max_age)

    @property
    def name(self) -> str:
        return self._name

    async def get(self) -> T | None:
        return await self._engine.get(self._name)

    async def set(self, value: T = MISSING) -> T:
        """Store value for max_age. None deletes the entry."""
        if value is MISSING:
            raise InvalidArgumentError("Expected a value to be stored")
        return await self._engine.set(self._name, value, self._max_age)

    async def delete(self) -> None:
        await self._engine.delete(self._name)

    async def is_cached(self) -> bool:
        return await self._engine.has(self._name)
