"""Time-bounded in-memory cache."""

import logging
from typing import Any, Callable, Hashable, Optional

from freeboard.utils.clock import SystemClock

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


class TTLCache:
    """Mapping whose entries expire a fixed number of seconds after insertion.

    The cache is an ordinary object: callers own it and pass it to the
    services that use it, so tests can build a fresh one per case.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock=None):
        """Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry in seconds
            clock: Object with a timestamp() method (defaults to SystemClock)
        """
        self.ttl_seconds = ttl_seconds
        self.clock = clock or SystemClock()
        self._entries: dict[Hashable, tuple[Any, float]] = {}

    def _is_fresh(self, stored_at: float) -> bool:
        return self.clock.timestamp() - stored_at < self.ttl_seconds

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if not self._is_fresh(stored_at):
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store a value under key, resetting its age."""
        self._entries[key] = (value, self.clock.timestamp())

    def invalidate(self, predicate: Callable[[Hashable], bool]) -> int:
        """Drop every entry whose key matches predicate. Returns the count."""
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def prune(self) -> int:
        """Drop expired entries. Returns the count removed."""
        removed = self.invalidate(lambda key: not self._is_fresh(self._entries[key][1]))
        if removed:
            logger.debug("Pruned %d expired cache entries", removed)
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
