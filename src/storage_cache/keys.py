"""Cache key derivation for cached functions."""

import json
from collections.abc import Sequence
from typing import Any

from storage_cache.errors import InvalidArgumentError
from storage_cache.types import CacheKeyFn


def json_cache_key(args: Sequence[Any]) -> str:
    """Serialize call arguments as compact JSON, e.g. ``["@anne",1]``.

    Dict key order is kept, so ``{"a": 1, "b": 2}`` and ``{"b": 2, "a": 1}``
    produce different keys. Pass a custom ``cache_key`` for anything looser.
    """
    try:
        return json.dumps(list(args), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Cannot derive a cache key from arguments {args!r}; "
            "pass a cache_key function"
        ) from e


def derive_key(name: str, cache_key: CacheKeyFn | None, args: Sequence[Any]) -> str:
    """Build the logical cache key for a call.

    Calls without arguments share the bare ``name`` slot.
    """
    if not args:
        return name

    serializer = cache_key if cache_key is not None else json_cache_key
    suffix = serializer(args)
    if not isinstance(suffix, str):
        raise InvalidArgumentError(
            f"cache_key must return a string, got {type(suffix).__name__}"
        )
    return f"{name}:{suffix}"
