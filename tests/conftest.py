"""Shared pytest fixtures."""

from collections.abc import Callable

import pytest

from aioquery import QueryClient


class ManualTimer:
    """Timer that only fires when ManualScheduler.advance() passes it."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler with a controllable clock, for deterministic timer tests."""

    def __init__(self, start: float = 1_000_000) -> None:
        self.current = start
        self.timers: list[ManualTimer] = []

    def now(self) -> float:
        return self.current

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.current + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, ms: float) -> None:
        """Move the clock forward and run every timer that came due."""
        self.current += ms
        due = [t for t in self.pending if t.when <= self.current]
        for timer in due:
            self.timers.remove(timer)
            timer.callback()


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Create a fresh ManualScheduler for each test."""
    return ManualScheduler()


@pytest.fixture
def manual_client(scheduler: ManualScheduler) -> QueryClient:
    """Create a QueryClient driven by the manual scheduler."""
    return QueryClient(scheduler=scheduler)


@pytest.fixture
def client() -> QueryClient:
    """Create a QueryClient on the real event loop with instant retries."""
    return QueryClient(default_retry_delay=0)
