"""aioquery - async query cache with dedupe, retries and garbage collection."""

# Client API
from aioquery.client import QueryClient, require_client

# Duration parsing
from aioquery.duration import parse_duration
from aioquery.errors import ConfigurationError

# Matchers
from aioquery.matchers import ALL, All, Exact, Matcher, Predicate
from aioquery.query import Query
from aioquery.retry import exponential_backoff, normalize_retry

# Schedulers
from aioquery.schedulers import LoopScheduler, Scheduler, Timer

# Core types
from aioquery.types import (
    Duration,
    Listener,
    QueryConfig,
    QueryOptions,
    QueryState,
    QueryStatus,
    RetryDelay,
)

__version__ = "0.1.0"

__all__ = [
    "ALL",
    "All",
    "ConfigurationError",
    "Duration",
    "Exact",
    "Listener",
    "LoopScheduler",
    "Matcher",
    "Predicate",
    "Query",
    "QueryClient",
    "QueryConfig",
    "QueryOptions",
    "QueryState",
    "QueryStatus",
    "RetryDelay",
    "Scheduler",
    "Timer",
    "exponential_backoff",
    "normalize_retry",
    "parse_duration",
    "require_client",
]
