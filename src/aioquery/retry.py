"""Retry count normalization and backoff."""

DEFAULT_RETRY = 3
MAX_RETRY_DELAY = 30_000


def normalize_retry(retry: int | bool) -> int:
    """Turn a retry setting into a retry count. True means 3, False means 0."""
    # bool is an int subclass, check it first
    if retry is True:
        return DEFAULT_RETRY
    if retry is False:
        return 0
    if retry < 0:
        raise ValueError(f"Invalid retry count: {retry!r}")
    return retry


def exponential_backoff(attempt: int) -> float:
    """Exponential backoff in milliseconds: 1s, 2s, 4s, ... capped at 30s."""
    return min(1000 * 2 ** (attempt - 1), MAX_RETRY_DELAY)
