"""Base scheduler protocols for timers and clocks."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable


@runtime_checkable
class Timer(Protocol):
    """Handle for a scheduled callback."""

    def cancel(self) -> None:
        """Prevent the callback from running. No-op if it already ran."""
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Deferred-execution primitive used for retry backoff and GC eviction."""

    def now(self) -> float:
        """Current time as a Unix timestamp in milliseconds."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Timer:
        """Run ``callback`` after ``delay`` milliseconds."""
        ...
