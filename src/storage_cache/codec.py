"""Mapping between cache entries and the blobs kept by storage adapters."""

from __future__ import annotations

import json
import math
from typing import Any

from storage_cache.errors import InvalidArgumentError, InvalidEntryError
from storage_cache.types import CacheEntry

DEFAULT_PREFIX = "cache"


def storage_key(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    """Build the adapter key for a logical cache name."""
    return f"{prefix}:{name}"


def is_storage_key(key: str, prefix: str = DEFAULT_PREFIX) -> bool:
    """Check whether an adapter key belongs to the cache namespace."""
    return key.startswith(f"{prefix}:")


def ensure_cache_value(value: Any) -> None:
    """Raise InvalidArgumentError unless value is JSON-compatible and not None.

    Only values that read back unchanged from a serializing store are
    accepted: objects need string keys and sequences must be lists.
    """
    if value is None:
        raise InvalidArgumentError("None cannot be stored in the cache")
    try:
        json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Cache values must be JSON-compatible, got {type(value).__name__}: {e}"
        ) from e
    _ensure_json_shape(value)


def _ensure_json_shape(value: Any) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise InvalidArgumentError(
                    f"Cache values must be JSON-compatible, got key {key!r}"
                )
            _ensure_json_shape(item)
    elif isinstance(value, list):
        for item in value:
            _ensure_json_shape(item)
    elif value is not None and not isinstance(value, (str, int, float)):
        raise InvalidArgumentError(
            f"Cache values must be JSON-compatible, got {type(value).__name__}"
        )


def encode_entry(entry: CacheEntry[Any]) -> dict[str, Any]:
    """Serialize a cache entry to the blob stored by the adapter."""
    ensure_cache_value(entry.data)
    return {"data": entry.data, "expiresAt": entry.expires_at}


def decode_entry(blob: Any) -> CacheEntry[Any]:
    """Deserialize an adapter blob to a cache entry."""
    if not isinstance(blob, dict) or "data" not in blob or "expiresAt" not in blob:
        raise InvalidEntryError(f"Not a cache entry: {blob!r}")
    expires_at = blob["expiresAt"]
    if (
        isinstance(expires_at, bool)
        or not isinstance(expires_at, (int, float))
        or not math.isfinite(expires_at)
    ):
        raise InvalidEntryError(f"Invalid expiresAt: {expires_at!r}")
    return CacheEntry(data=blob["data"], expires_at=int(expires_at))
