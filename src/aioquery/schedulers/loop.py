"""asyncio event loop scheduler."""

import asyncio
import time
from collections.abc import Callable


class LoopScheduler:
    """Scheduler backed by the asyncio event loop and the wall clock.

    Uses the running loop unless one is passed in, so timers can only be
    scheduled from inside a coroutine or loop callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> float:
        """Current time as a Unix timestamp in milliseconds."""
        return time.time() * 1000

    def call_later(
        self, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Run ``callback`` after ``delay`` milliseconds."""
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay, 0) / 1000, callback)
