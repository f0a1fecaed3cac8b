"""Duration parsing utilities."""

import re
from collections.abc import Callable

from aioquery.types import Duration, RetryDelay

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}


def parse_duration(duration: Duration) -> int:
    """Parse a duration to milliseconds.

    Accepts ``"<n>ms"``, ``"<n>s"``, ``"<n>m"``, ``"<n>h"``, ``"<n>d"`` or a
    non-negative integer of milliseconds. Negative integers, booleans and
    anything else raise ValueError, so stale and cache times are always >= 0.
    """
    if isinstance(duration, int) and not isinstance(duration, bool):
        if duration < 0:
            raise ValueError(f"Invalid duration: {duration!r}")
        return duration

    if not isinstance(duration, str):
        raise ValueError(f"Invalid duration: {duration!r}")

    match = _DURATION_PATTERN.match(duration)
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    value, unit = match.groups()
    return int(value) * _UNITS[unit]


def parse_retry_delay(delay: RetryDelay) -> float | Callable[[int], float]:
    """Resolve a retry delay setting to milliseconds or a per-attempt callable.

    Callables pass through. Floats are fractional milliseconds and must not
    be negative; everything else goes through parse_duration.
    """
    if callable(delay):
        return delay
    if isinstance(delay, float):
        if delay < 0:
            raise ValueError(f"Invalid duration: {delay!r}")
        return delay
    return parse_duration(delay)
