"""Stale-time query cache shared by the reads of one session."""

import threading
import time
from typing import Any, Callable, Hashable

from ..utils.logging import get_logger

logger = get_logger(__name__)


class QueryCache:
    """
    Caches query results by key for ``stale_time`` seconds.

    Keys are tuples whose first element names the operation, so mutations can
    drop every cached result of an operation at once.
    """

    def __init__(self, stale_time: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: dict[tuple, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get_or_fetch(self, key: tuple[Hashable, ...], fetch: Callable[[], Any]) -> Any:
        """Return the fresh cached value for ``key`` or fetch and store a new one.

        Failed fetches are not cached.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now - entry[0] < self.stale_time:
                logger.debug(f"Cache hit: {key[0]}")
                return entry[1]

        value = fetch()
        with self._lock:
            self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, *operations: str) -> None:
        """Drop cached results of the named operations, or everything if none given."""
        with self._lock:
            if not operations:
                self._entries.clear()
                return
            for key in [k for k in self._entries if k[0] in operations]:
                del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
