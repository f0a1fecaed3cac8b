"""Query client - registry of queries with garbage collection."""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType
from typing import Any, TypeVar, cast

import structlog

from aioquery.duration import parse_duration, parse_retry_delay
from aioquery.errors import ConfigurationError
from aioquery.matchers import ALL, Matcher
from aioquery.query import Query
from aioquery.retry import DEFAULT_RETRY, exponential_backoff, normalize_retry
from aioquery.schedulers.base import Scheduler, Timer
from aioquery.schedulers.loop import LoopScheduler
from aioquery.types import Duration, QueryConfig, QueryOptions, RetryDelay

T = TypeVar("T")

logger = structlog.get_logger(__name__)


class QueryClient:
    """Owns queries by key, and evicts unused ones after their cache time.

    Create one per application and pass it to whatever needs it:

        async with QueryClient(default_stale_time="30s") as client:
            todos = await client.fetch_query(
                QueryConfig(query_key="todos", query_fn=load_todos)
            )
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        default_stale_time: Duration = 0,
        default_cache_time: Duration = "5m",
        default_retry: int | bool = DEFAULT_RETRY,
        default_retry_delay: RetryDelay | None = None,
    ) -> None:
        self._scheduler: Scheduler = scheduler or LoopScheduler()
        self._default_stale_time = parse_duration(default_stale_time)
        self._default_cache_time = parse_duration(default_cache_time)
        self._default_retry = default_retry
        normalize_retry(default_retry)
        self._default_retry_delay: float | Callable[[int], float] = (
            parse_retry_delay(default_retry_delay)
            if default_retry_delay is not None
            else exponential_backoff
        )
        self._queries: dict[str, Query[Any]] = {}
        self._gc_timers: dict[str, Timer] = {}
        self._closed = False

    def __len__(self) -> int:
        return len(self._queries)

    def __contains__(self, key: object) -> bool:
        return key in self._queries

    def keys(self) -> list[str]:
        """Keys of all tracked queries."""
        return list(self._queries)

    @property
    def closed(self) -> bool:
        return self._closed

    def ensure_query(self, config: QueryConfig[T]) -> Query[T]:
        """Return the query for ``config.query_key``, creating it if needed.

        The first config registered for a key wins; later configs for the
        same key are ignored.
        """
        self._check_open()
        existing = self._queries.get(config.query_key)
        if existing is not None:
            return cast(Query[T], existing)

        query: Query[T] = Query(
            config.query_key,
            config.query_fn,
            self._resolve_options(config),
            scheduler=self._scheduler,
            on_subscribe=self._on_subscribe,
        )
        self._queries[config.query_key] = query
        logger.debug("query_created", key=config.query_key)
        return query

    def get_query(self, key: str) -> Query[Any] | None:
        """Look up a query without creating it."""
        return self._queries.get(key)

    async def fetch_query(self, config: QueryConfig[T]) -> T | None:
        """Ensure the query, wait for its fetch, and return its data.

        Data is None when the query ended in error; check
        ``get_state().status`` to tell the two apart.
        """
        query = self.ensure_query(config)
        await query.fetch()
        return query.get_state().data

    def invalidate_query(self, matcher: Matcher = ALL) -> None:
        """Mark matching queries stale. Does not refetch."""
        self._check_open()
        for key, query in list(self._queries.items()):
            if matcher.matches(key):
                query.invalidate()

    def remove_queries(self, matcher: Matcher = ALL) -> None:
        """Drop matching queries now, even if they have subscribers."""
        self._check_open()
        for key in list(self._queries):
            if matcher.matches(key):
                self._cancel_gc(key)
                del self._queries[key]
                logger.debug("query_removed", key=key)

    def gc(self) -> None:
        """Schedule eviction of every query that has no subscribers.

        Each query is evicted after its own cache time, unless a subscriber
        shows up first.
        """
        self._check_open()
        for key, query in self._queries.items():
            if query.subscriber_count > 0:
                continue
            if key in self._gc_timers:
                continue

            self._gc_timers[key] = self._scheduler.call_later(
                query.options.cache_time,
                lambda key=key, query=query: self._evict(key, query),
            )
            logger.debug(
                "query_gc_scheduled", key=key, cache_time=query.options.cache_time
            )

    def close(self) -> None:
        """Cancel every timer, stop retry backoffs and drop all queries."""
        if self._closed:
            return
        self._closed = True
        for timer in self._gc_timers.values():
            timer.cancel()
        self._gc_timers.clear()
        for query in self._queries.values():
            query.dispose()
        self._queries.clear()
        logger.debug("query_client_closed")

    async def __aenter__(self) -> QueryClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise ConfigurationError("QueryClient is closed")

    def _resolve_options(self, config: QueryConfig[Any]) -> QueryOptions:
        return QueryOptions(
            stale_time=(
                parse_duration(config.stale_time)
                if config.stale_time is not None
                else self._default_stale_time
            ),
            cache_time=(
                parse_duration(config.cache_time)
                if config.cache_time is not None
                else self._default_cache_time
            ),
            retry=config.retry if config.retry is not None else self._default_retry,
            retry_delay=(
                parse_retry_delay(config.retry_delay)
                if config.retry_delay is not None
                else self._default_retry_delay
            ),
        )

    def _on_subscribe(self, query: Query[Any]) -> None:
        # Removed queries can still be subscribed to; leave the timer of a
        # newer query under the same key alone.
        if self._queries.get(query.key) is query:
            self._cancel_gc(query.key)

    def _cancel_gc(self, key: str) -> None:
        timer = self._gc_timers.pop(key, None)
        if timer is not None:
            timer.cancel()
            logger.debug("query_gc_cancelled", key=key)

    def _evict(self, key: str, query: Query[Any]) -> None:
        self._gc_timers.pop(key, None)
        if self._queries.get(key) is not query:
            return
        if query.subscriber_count == 0:
            del self._queries[key]
            logger.debug("query_evicted", key=key)


def require_client(client: QueryClient | None) -> QueryClient:
    """Return ``client``, or raise ConfigurationError if there is none.

    Integration layers call this on the client they were handed before
    touching any query.
    """
    if client is None:
        raise ConfigurationError(
            "No QueryClient available; construct one and pass it in"
        )
    return client


__all__ = ["QueryClient", "require_client"]
