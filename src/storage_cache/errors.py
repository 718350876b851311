"""Exceptions raised by storage_cache.

Errors from the storage adapter are not wrapped: they reach the caller of
the operation that triggered them unchanged.
"""


class CacheError(Exception):
    """Base class for storage_cache errors."""


class InvalidArgumentError(CacheError, TypeError):
    """A value, argument or option that the cache cannot accept."""


class NoUpdaterConfiguredError(CacheError, TypeError):
    """A fresh value was needed but the cached function has no updater."""


class InvalidEntryError(CacheError, ValueError):
    """A stored blob does not have the shape of a cache entry."""
