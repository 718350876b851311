"""Base adapter protocols for storage backends."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AsyncStorageAdapter(Protocol):
    """Async key-value storage interface.

    Keys are opaque strings and values are JSON-compatible blobs. Adapter
    errors are passed through to callers unchanged.
    """

    async def get(self, key: str) -> Any | None:
        """Get the blob stored under key, or None."""
        ...

    async def get_all(self) -> dict[str, Any]:
        """Get every stored blob, keyed by its key."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a blob."""
        ...

    async def remove(self, keys: str | list[str]) -> None:
        """Remove one or more keys. Missing keys are ignored."""
        ...

    async def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        ...


@runtime_checkable
class AsyncKeyListingAdapter(Protocol):
    """Optional mixin for adapters that can list keys without reading values."""

    async def list_keys(self) -> list[str]:
        """List every stored key."""
        ...
