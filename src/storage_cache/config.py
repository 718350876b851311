"""Configuration for cached functions."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from storage_cache.duration import parse_duration
from storage_cache.errors import InvalidArgumentError
from storage_cache.types import CacheKeyFn, Duration

T = TypeVar("T")

DEFAULT_MAX_AGE: Duration = "30d"


def parse_duration_option(field_name: str, duration: Duration) -> int:
    """Parse a duration passed as an option, naming the option on failure."""
    try:
        return parse_duration(duration)
    except ValueError as e:
        raise InvalidArgumentError(f"{field_name}: {e}") from e


@dataclass(frozen=True, slots=True)
class CachedFunctionConfig(Generic[T]):
    """Configuration for a cached function.

    ``max_age`` and ``stale_while_revalidate`` are added together into the
    horizon written with every refreshed entry. A config without an
    ``updater`` can still read, override and delete entries.
    """

    name: str
    updater: Callable[..., Awaitable[T | None]] | None = None
    max_age: Duration = DEFAULT_MAX_AGE
    stale_while_revalidate: Duration = 0
    cache_key: CacheKeyFn | None = None
    should_revalidate: Callable[[T], bool] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidArgumentError("name must be a non-empty string")
        for field_name in ("updater", "cache_key", "should_revalidate"):
            value = getattr(self, field_name)
            if value is not None and not callable(value):
                raise InvalidArgumentError(f"{field_name} must be callable")
        for field_name in ("max_age", "stale_while_revalidate"):
            parse_duration_option(field_name, getattr(self, field_name))

    @property
    def max_age_ms(self) -> int:
        return parse_duration(self.max_age)

    @property
    def stale_while_revalidate_ms(self) -> int:
        return parse_duration(self.stale_while_revalidate)

    @property
    def horizon_ms(self) -> int:
        """Lifetime of a refreshed entry: max age plus the SWR window."""
        return self.max_age_ms + self.stale_while_revalidate_ms
