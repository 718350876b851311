"""Shared pytest fixtures."""

from typing import Any

import pytest

from storage_cache import AsyncMemoryAdapter, CacheEngine
from storage_cache.engine import now_ms

DAY_MS = 86_400_000


@pytest.fixture
def async_adapter() -> AsyncMemoryAdapter:
    """Create a fresh AsyncMemoryAdapter for each test."""
    return AsyncMemoryAdapter()


@pytest.fixture
def engine(async_adapter: AsyncMemoryAdapter) -> CacheEngine:
    """Create a CacheEngine over the memory adapter."""
    return CacheEngine(async_adapter)


@pytest.fixture
def seed_cache(async_adapter: AsyncMemoryAdapter) -> Any:
    """Write entries straight into the store, expiring days_from_now days from now."""

    async def seed(days_from_now: float, entries: dict[str, Any]) -> None:
        for key, data in entries.items():
            # Unbound call so recording subclasses do not count seeding
            await AsyncMemoryAdapter.set(
                async_adapter,
                key,
                {"data": data, "expiresAt": now_ms() + int(days_from_now * DAY_MS)},
            )

    return seed
