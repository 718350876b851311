"""Core types for storage_cache."""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

# JSON-compatible values, excluding None (None means "no value")
CacheValue = Union[bool, int, float, str, list[Any], dict[str, Any]]

# "30s", "5m", "2h", "1d", milliseconds, timedelta or {"days": 1, "hours": 2}
Duration = str | int | timedelta | Mapping[str, int | float]

CacheKeyFn = Callable[[Sequence[Any]], str]


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A stored value with its absolute expiry."""

    data: T
    expires_at: int  # Unix timestamp ms


# Marks an argument that was not passed at all, as opposed to None
MISSING: Any = object()
