"""Query - per-key state machine and fetch coordinator.

A Query owns its state, its subscribers and at most one in-flight fetch.
State moves idle -> pending -> success | error, and back to pending on every
later fetch. Listeners are notified synchronously on each mutation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import suppress
from dataclasses import replace
from typing import Any, Generic, TypeVar

import structlog

from aioquery.errors import ConfigurationError
from aioquery.schedulers.base import Scheduler, Timer
from aioquery.types import Listener, QueryOptions, QueryState

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class Query(Generic[T]):
    """A cached async value identified by a key."""

    def __init__(
        self,
        key: str,
        fn: Callable[[], Awaitable[T]],
        options: QueryOptions,
        *,
        scheduler: Scheduler,
        on_subscribe: Callable[[Query[Any]], None] | None = None,
    ) -> None:
        self._key = key
        self._fn = fn
        self._options = options
        self._scheduler = scheduler
        self._on_subscribe = on_subscribe
        self._state: QueryState[T] = QueryState()
        self._subscribers: list[Listener] = []
        self._in_flight: asyncio.Task[None] | None = None
        self._backoff_timer: Timer | None = None
        self._backoff_waiter: asyncio.Future[None] | None = None
        self._disposed = False

    def __repr__(self) -> str:
        return f"Query(key={self._key!r}, status={self._state.status!r})"

    @property
    def key(self) -> str:
        return self._key

    @property
    def options(self) -> QueryOptions:
        return self._options

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def get_state(self) -> QueryState[T]:
        """Return the current state.

        The snapshot is immutable; call again after any await to see
        later changes.
        """
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        self._subscribers.append(listener)
        if self._on_subscribe is not None:
            self._on_subscribe(self)

        unsubscribed = False

        def unsubscribe() -> None:
            nonlocal unsubscribed
            if unsubscribed:
                return
            unsubscribed = True
            with suppress(ValueError):
                self._subscribers.remove(listener)

        return unsubscribe

    def is_stale(self) -> bool:
        """Check if data is invalidated, missing, or older than stale_time."""
        if self._state.invalidated:
            return True
        if self._state.last_updated is None:
            return True
        age = self._scheduler.now() - self._state.last_updated
        return age > self._options.stale_time

    def invalidate(self) -> None:
        """Mark data stale. Does not refetch."""
        self._set_state(replace(self._state, invalidated=True))

    def set_data(self, data: T) -> None:
        """Write data directly, as if a fetch had just succeeded."""
        self._set_state(
            replace(
                self._state,
                status="success",
                data=data,
                error=None,
                last_updated=self._scheduler.now(),
                invalidated=False,
            )
        )

    def fetch(self) -> asyncio.Future[None]:
        """Start a fetch, or join the one in flight.

        Returns the shared in-flight task when there is one, and an already
        resolved future when the data is fresh. The returned future always
        resolves to None; failures are reported through ``get_state()``.
        """
        if self._disposed:
            raise ConfigurationError(
                f"Query {self._key!r} belongs to a closed client"
            )

        if self._in_flight is not None:
            return self._in_flight

        loop = asyncio.get_running_loop()

        if self._state.status == "success" and not self.is_stale():
            done: asyncio.Future[None] = loop.create_future()
            done.set_result(None)
            return done

        task = loop.create_task(self._run(), name=f"aioquery.fetch:{self._key}")
        self._in_flight = task
        logger.debug("query_fetch_started", key=self._key)
        self._set_state(
            replace(self._state, status="pending", is_fetching=True, error=None)
        )
        return task

    def dispose(self) -> None:
        """Cut a pending backoff short and refuse further fetches."""
        self._disposed = True
        if self._backoff_timer is not None:
            self._backoff_timer.cancel()
            self._backoff_timer = None
        if self._backoff_waiter is not None and not self._backoff_waiter.done():
            self._backoff_waiter.set_result(None)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _set_state(self, state: QueryState[T]) -> None:
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._subscribers):
            try:
                listener()
            except Exception:
                logger.exception("query_listener_failed", key=self._key)

    async def _run(self) -> None:
        max_retries = self._options.max_retries
        attempt = 1
        try:
            while True:
                try:
                    data = await self._fn()
                except Exception as exc:
                    if attempt > max_retries or self._disposed:
                        self._fail(exc, attempt)
                        return
                    delay = self._options.delay_for(attempt)
                    logger.debug(
                        "query_fetch_retrying",
                        key=self._key,
                        attempt=attempt,
                        delay_ms=delay,
                        error=repr(exc),
                    )
                    await self._backoff(delay)
                    if self._disposed:
                        self._fail(exc, attempt)
                        return
                    attempt += 1
                    continue

                logger.debug("query_fetch_succeeded", key=self._key, attempt=attempt)
                self._set_state(
                    replace(
                        self._state,
                        status="success",
                        data=data,
                        error=None,
                        last_updated=self._scheduler.now(),
                        invalidated=False,
                    )
                )
                return
        finally:
            self._in_flight = None
            self._set_state(replace(self._state, is_fetching=False))

    def _fail(self, exc: Exception, attempts: int) -> None:
        logger.warning(
            "query_fetch_failed", key=self._key, attempts=attempts, error=repr(exc)
        )
        self._set_state(replace(self._state, status="error", error=exc))

    async def _backoff(self, delay: float) -> None:
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def wake() -> None:
            if not waiter.done():
                waiter.set_result(None)

        self._backoff_waiter = waiter
        self._backoff_timer = self._scheduler.call_later(delay, wake)
        try:
            await waiter
        finally:
            self._backoff_timer = None
            self._backoff_waiter = None


__all__ = ["Query"]
