"""Duration parsing utilities."""

import math
import re
from collections.abc import Mapping
from datetime import timedelta

from storage_cache.types import Duration

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}
_FIELDS: dict[str, int] = {
    "days": _UNITS["d"],
    "hours": _UNITS["h"],
    "minutes": _UNITS["m"],
    "seconds": _UNITS["s"],
    "milliseconds": _UNITS["ms"],
}


def parse_duration(duration: Duration) -> int:
    """Parse a duration to milliseconds. Passthrough if already int.

    Accepts "30s"-style strings, ints, ``timedelta`` and mappings such as
    ``{"days": 1, "hours": 12}``.
    """
    if isinstance(duration, bool):
        raise ValueError(f"Invalid duration: {duration!r}")

    if isinstance(duration, int):
        ms = duration
    elif isinstance(duration, timedelta):
        ms = duration // timedelta(milliseconds=1)
    elif isinstance(duration, Mapping):
        unknown = set(duration) - set(_FIELDS)
        if unknown:
            raise ValueError(f"Invalid duration fields: {sorted(unknown)!r}")
        if not all(
            isinstance(amount, (int, float))
            and not isinstance(amount, bool)
            and math.isfinite(amount)
            for amount in duration.values()
        ):
            raise ValueError(f"Invalid duration: {duration!r}")
        ms = round(sum(duration[name] * _FIELDS[name] for name in duration))
    elif isinstance(duration, str):
        match = _DURATION_PATTERN.match(duration)
        if not match:
            raise ValueError(f"Invalid duration: {duration!r}")
        value, unit = match.groups()
        ms = int(value) * _UNITS[unit]
    else:
        raise ValueError(f"Invalid duration: {duration!r}")

    if ms < 0:
        raise ValueError(f"Duration must not be negative: {duration!r}")
    return ms
