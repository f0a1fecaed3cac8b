"""Schedulers for aioquery timers."""

from aioquery.schedulers.base import Scheduler, Timer
from aioquery.schedulers.loop import LoopScheduler

__all__ = [
    "LoopScheduler",
    "Scheduler",
    "Timer",
]
