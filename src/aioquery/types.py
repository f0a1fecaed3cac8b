"""Core types for aioquery."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from aioquery.retry import normalize_retry

T = TypeVar("T")

QueryStatus = Literal["idle", "pending", "success", "error"]

# Listeners take no arguments; they call Query.get_state() for the new value
Listener = Callable[[], None]

# Duration type alias
Duration = str | int  # "30s", "5m", "2h", "1d" or milliseconds

RetryDelay = Duration | float | Callable[[int], float]


@dataclass(frozen=True, slots=True)
class QueryState(Generic[T]):
    """Snapshot of a query. Every mutation produces a new instance."""

    status: QueryStatus = "idle"
    is_fetching: bool = False
    data: T | None = None
    error: BaseException | None = None
    last_updated: float | None = None  # Unix timestamp ms
    invalidated: bool = False


@dataclass(frozen=True, slots=True)
class QueryConfig(Generic[T]):
    """Configuration for a query. ``None`` fields fall back to client defaults."""

    query_key: str
    query_fn: Callable[[], Awaitable[T]]
    stale_time: Duration | None = None
    cache_time: Duration | None = None
    retry: int | bool | None = None
    retry_delay: RetryDelay | None = None


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Resolved options a Query runs with (milliseconds)."""

    stale_time: int
    cache_time: int
    retry: int | bool
    retry_delay: float | Callable[[int], float]

    def __post_init__(self) -> None:
        if self.stale_time < 0:
            raise ValueError("stale_time must be >= 0")
        if self.cache_time < 0:
            raise ValueError("cache_time must be >= 0")
        if not callable(self.retry_delay) and self.retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        normalize_retry(self.retry)

    @property
    def max_retries(self) -> int:
        """Number of retries after the first attempt."""
        return normalize_retry(self.retry)

    def delay_for(self, attempt: int) -> float:
        """Backoff in milliseconds after the given failed attempt."""
        if callable(self.retry_delay):
            return self.retry_delay(attempt)
        return self.retry_delay
