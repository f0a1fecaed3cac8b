"""Key matchers for bulk client operations.

A matcher is one of:
- All(): every key (the default, available as ``ALL``)
- Exact(substring): keys containing ``substring``
- Predicate(fn): keys for which ``fn(key)`` is true

Usage:
    client.invalidate_query(Exact("todos"))
    client.remove_queries(Predicate(lambda key: key.startswith("user:")))
"""

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class All:
    """Matches every key."""

    def matches(self, key: str) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Exact:
    """Matches keys that contain ``substring``."""

    substring: str

    def matches(self, key: str) -> bool:
        return self.substring in key


@dataclass(frozen=True, slots=True)
class Predicate:
    """Matches keys accepted by ``fn``."""

    fn: Callable[[str], bool]

    def matches(self, key: str) -> bool:
        return bool(self.fn(key))


Matcher = All | Exact | Predicate

ALL = All()

__all__ = ["ALL", "All", "Exact", "Matcher", "Predicate"]
