"""Request-keyed read cache with staleness, de-duplication and invalidation.

Reads are keyed by a stable string built from the request path and its query
parameters. A fresh entry is served without I/O. An entry that is only old
is served immediately while a background refetch runs. Invalidated, failed
or missing entries are fetched before returning. Concurrent reads of a key
share one in-flight fetch.

Ordering: the most recently dispatched fetch wins. Invalidating a key
detaches its in-flight fetch, whose result then still reaches the callers
already waiting on it but is never written to the cache.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from src.client.errors import QueryCancelledError

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]


def query_key(path: str, params: Mapping[str, Any] | None = None) -> str:
    """Build a stable cache key from a path and query parameters.

    Parameters are sorted and ``None`` values dropped, so logically equal
    requests share a key regardless of argument order.
    """
    if not params:
        return path
    items = sorted((name, value) for name, value in params.items() if value is not None)
    if not items:
        return path
    return f"{path}?{urlencode(items, doseq=True)}"


@dataclass
class QueryResult:
    """Outcome of a cached read.

    ``data`` holds the freshest value available, which after a failed
    refetch is the previous value. ``error`` is set when the latest fetch
    failed.
    """

    data: Any = None
    error: Exception | None = None
    is_stale: bool = False
    fetched_at: float | None = None

    @property
    def ok(self) -> bool:
        """True when the latest fetch succeeded."""
        return self.error is None


@dataclass
class _FetchOutcome:
    data: Any = None
    error: Exception | None = None


@dataclass
class CacheEntry:
    """State held for one request key."""

    data: Any = None
    has_data: bool = False
    error: Exception | None = None
    fetched_at: float | None = None
    invalidated: bool = False
    generation: int = 0
    waiters: int = 0
    in_flight: asyncio.Task | None = field(default=None, repr=False)

    def is_fresh(self, stale_time: float, now: float) -> bool:
        """Check if the entry can be served without refetching."""
        return (
            self.has_data
            and not self.invalidated
            and self.error is None
            and self.fetched_at is not None
            and now - self.fetched_at < stale_time
        )

    def can_serve_while_refreshing(self) -> bool:
        """Check if an aged entry may be shown during a background refetch."""
        return self.has_data and not self.invalidated and self.error is None


@dataclass
class QueryCacheConfig:
    """Configuration for the query cache."""

    default_stale_seconds: float = 60.0  # list endpoints
    poll_interval_seconds: float = 10.0  # open chat thread

    @classmethod
    def from_settings(cls, settings: Any = None) -> "QueryCacheConfig":
        """Create config from client settings."""
        from src.core.config import get_client_settings

        settings = settings or get_client_settings()
        return cls(
            default_stale_seconds=settings.list_stale_seconds,
            poll_interval_seconds=settings.chat_poll_seconds,
        )


class QueryCache:
    """In-memory cache of API reads for a single event loop."""

    def __init__(
        self,
        config: QueryCacheConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the query cache.

        Args:
            config: Optional cache configuration.
            clock: Monotonic time source, in seconds.
        """
        self.config = config or QueryCacheConfig()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._fetches = 0
        self._deduplicated = 0

    async def read(
        self,
        key: str,
        fetcher: Fetcher,
        stale_time: float | None = None,
    ) -> QueryResult:
        """Read a key, fetching as needed.

        Args:
            key: Request key (see query_key()).
            fetcher: Coroutine factory performing the network call.
            stale_time: Seconds an entry stays fresh; defaults to the config.

        Returns:
            QueryResult: Never raises for fetch failures; they land in ``error``.
        """
        entry = self._entries.setdefault(key, CacheEntry())
        max_age = self.config.default_stale_seconds if stale_time is None else stale_time

        if entry.is_fresh(max_age, self._clock()):
            self._hits += 1
            return QueryResult(data=entry.data, fetched_at=entry.fetched_at)

        task = self._ensure_fetch(key, entry, fetcher)

        if entry.can_serve_while_refreshing():
            logger.debug("Serving stale %s while refetching", key)
            return QueryResult(data=entry.data, is_stale=True, fetched_at=entry.fetched_at)

        entry.waiters += 1
        try:
            outcome: _FetchOutcome = await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return QueryResult(
                data=entry.data if entry.has_data else None,
                error=QueryCancelledError(f"Read of {key} was cancelled"),
                is_stale=entry.has_data,
                fetched_at=entry.fetched_at,
            )
        finally:
            entry.waiters -= 1

        if outcome.error is not None:
            return QueryResult(
                data=entry.data if entry.has_data else None,
                error=outcome.error,
                is_stale=entry.has_data,
                fetched_at=entry.fetched_at,
            )
        return QueryResult(data=outcome.data, fetched_at=entry.fetched_at)

    def _ensure_fetch(self, key: str, entry: CacheEntry, fetcher: Fetcher) -> asyncio.Task:
        if entry.in_flight is not None and not entry.in_flight.done():
            self._deduplicated += 1
            logger.debug("Joining in-flight fetch for %s", key)
            return entry.in_flight

        task = asyncio.create_task(self._run_fetch(key, entry, fetcher, entry.generation))
        entry.in_flight = task
        self._fetches += 1
        return task

    async def _run_fetch(
        self,
        key: str,
        entry: CacheEntry,
        fetcher: Fetcher,
        generation: int,
    ) -> _FetchOutcome:
        try:
            data = await fetcher()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Fetch failed for %s: %s", key, e)
            if self._is_current(key, entry, generation):
                entry.error = e
            return _FetchOutcome(error=e)
        finally:
            if entry.in_flight is asyncio.current_task():
                entry.in_flight = None

        if self._is_current(key, entry, generation):
            entry.data = data
            entry.has_data = True
            entry.error = None
            entry.invalidated = False
            entry.fetched_at = self._clock()
        else:
            logger.debug("Discarding superseded result for %s", key)
        return _FetchOutcome(data=data)

    def _is_current(self, key: str, entry: CacheEntry, generation: int) -> bool:
        return self._entries.get(key) is entry and entry.generation == generation

    def peek(self, key: str) -> QueryResult | None:
        """Return what is cached for a key without fetching."""
        entry = self._entries.get(key)
        if entry is None or not (entry.has_data or entry.error):
            return None
        return QueryResult(
            data=entry.data if entry.has_data else None,
            error=entry.error,
            is_stale=entry.invalidated,
            fetched_at=entry.fetched_at,
        )

    def invalidate(self, key: str) -> bool:
        """Mark a key stale so the next read refetches.

        Returns:
            bool: True if the key was cached.
        """
        entry = self._entries.get(key)
        if entry is None:
            return False
        entry.generation += 1
        entry.invalidated = True
        entry.in_flight = None
        logger.debug("Invalidated %s", key)
        return True

    def invalidate_path(self, path: str) -> int:
        """Invalidate a path under every combination of query parameters.

        Returns:
            int: Number of keys invalidated.
        """
        keys = [key for key in self._entries if key == path or key.startswith(f"{path}?")]
        return sum(self.invalidate(key) for key in keys)

    def invalidate_prefix(self, prefix: str) -> int:
        """Invalidate every key starting with ``prefix``.

        Returns:
            int: Number of keys invalidated.
        """
        keys = [key for key in self._entries if key.startswith(prefix)]
        return sum(self.invalidate(key) for key in keys)

    def cancel(self, keys: Iterable[str]) -> int:
        """Cancel in-flight fetches for keys; their results are dropped.

        Used when the view that issued the reads goes away.

        Returns:
            int: Number of fetches cancelled.
        """
        cancelled = 0
        for key in keys:
            entry = self._entries.get(key)
            if entry is None or entry.in_flight is None:
                continue
            task = entry.in_flight
            entry.in_flight = None
            if not task.done():
                task.cancel()
                cancelled += 1
        if cancelled:
            logger.debug("Cancelled %d in-flight fetches", cancelled)
        return cancelled

    def release(self, keys: Iterable[str]) -> int:
        """Stop fetches for keys that no reader is waiting on any more.

        Unlike cancel(), a fetch another reader is still awaiting keeps
        running and its result is cached as usual.

        Returns:
            int: Number of fetches cancelled.
        """
        idle = [key for key in keys if key in self._entries and self._entries[key].waiters == 0]
        return self.cancel(idle)

    def clear(self) -> int:
        """Drop every entry and cancel every in-flight fetch.

        Returns:
            int: Number of entries cleared.
        """
        count = len(self._entries)
        self.cancel(list(self._entries))
        self._entries.clear()
        logger.info("Cleared %d entries from query cache", count)
        return count

    def get_stats(self) -> dict:
        """Get cache statistics for monitoring."""
        in_flight = sum(1 for e in self._entries.values() if e.in_flight is not None and not e.in_flight.done())
        return {
            "total_entries": len(self._entries),
            "in_flight": in_flight,
            "hits": self._hits,
            "fetches": self._fetches,
            "deduplicated": self._deduplicated,
            "default_stale_seconds": self.config.default_stale_seconds,
        }
