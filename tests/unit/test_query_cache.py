"""Unit tests for the client query cache."""

import asyncio

import pytest

from src.client.errors import NetworkError, QueryCancelledError
from src.client.query_cache import QueryCache, QueryCacheConfig, query_key


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFetcher:
    """Fetcher returning queued values (or raising queued errors) and counting calls."""

    def __init__(self, *results: object, gate: asyncio.Event | None = None) -> None:
        self.results = list(results)
        self.calls = 0
        self.gate = gate

    async def __call__(self) -> object:
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(result, Exception):
            raise result
        return result


async def settle() -> None:
    """Let scheduled background fetches run to completion."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> QueryCache:
    return QueryCache(QueryCacheConfig(default_stale_seconds=60, poll_interval_seconds=10), clock=clock)


class TestQueryKey:
    """Tests for query_key."""

    def test_path_only(self) -> None:
        assert query_key("/api/jobs") == "/api/jobs"

    def test_parameter_order_does_not_matter(self) -> None:
        assert query_key("/api/jobs", {"status": "open", "clientId": 3}) == query_key(
            "/api/jobs", {"clientId": 3, "status": "open"}
        )

    def test_none_values_dropped(self) -> None:
        assert query_key("/api/jobs", {"status": None}) == "/api/jobs"
        assert query_key("/api/jobs", {"status": "open", "search": None}) == "/api/jobs?status=open"


class TestRead:
    """Tests for QueryCache.read."""

    @pytest.mark.asyncio
    async def test_first_read_fetches(self, cache: QueryCache) -> None:
        fetcher = CountingFetcher(["job"])

        result = await cache.read("/api/jobs", fetcher)

        assert result.data == ["job"]
        assert result.ok
        assert not result.is_stale
        assert fetcher.calls == 1

    @pytest.mark.asyncio
    async def test_fresh_entry_served_without_fetch(self, cache: QueryCache, clock: FakeClock) -> None:
        fetcher = CountingFetcher("v1")
        await cache.read("k", fetcher)
        clock.advance(59)

        result = await cache.read("k", fetcher)

        assert result.data == "v1"
        assert fetcher.calls == 1
        assert cache.get_stats()["hits"] == 1

    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_fetch(self, cache: QueryCache) -> None:
        gate = asyncio.Event()
        fetcher = CountingFetcher("shared", gate=gate)

        readers = [asyncio.create_task(cache.read("k", fetcher)) for _ in range(3)]
        await settle()
        gate.set()
        results = await asyncio.gather(*readers)

        assert fetcher.calls == 1
        assert [r.data for r in results] == ["shared"] * 3
        assert cache.get_stats()["deduplicated"] == 2

    @pytest.mark.asyncio
    async def test_aged_entry_served_while_refetching(self, cache: QueryCache, clock: FakeClock) -> None:
        fetcher = CountingFetcher("v1", "v2")
        await cache.read("k", fetcher)
        clock.advance(61)

        result = await cache.read("k", fetcher)

        assert result.data == "v1"
        assert result.is_stale
        await settle()
        assert fetcher.calls == 2
        assert cache.peek("k").data == "v2"

    @pytest.mark.asyncio
    async def test_per_read_stale_time(self, cache: QueryCache, clock: FakeClock) -> None:
        fetcher = CountingFetcher("v1", "v2")
        await cache.read("thread", fetcher, stale_time=10)
        clock.advance(11)

        await cache.read("thread", fetcher, stale_time=10)
        await settle()

        assert fetcher.calls == 2

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_value(self, cache: QueryCache) -> None:
        fetcher = CountingFetcher("v1", NetworkError("offline"))
        await cache.read("k", fetcher)
        cache.invalidate("k")

        result = await cache.read("k", fetcher)

        assert result.data == "v1"
        assert isinstance(result.error, NetworkError)
        assert result.is_stale
        assert cache.peek("k").data == "v1"

    @pytest.mark.asyncio
    async def test_failure_without_previous_value(self, cache: QueryCache) -> None:
        result = await cache.read("k", CountingFetcher(NetworkError("offline")))

        assert result.data is None
        assert not result.ok

    @pytest.mark.asyncio
    async def test_errored_entry_refetches(self, cache: QueryCache) -> None:
        fetcher = CountingFetcher(NetworkError("offline"), "recovered")
        await cache.read("k", fetcher)

        result = await cache.read("k", fetcher)

        assert result.data == "recovered"
        assert result.ok
        assert fetcher.calls == 2


class TestInvalidation:
    """Tests for invalidate, invalidate_path and invalidate_prefix."""

    @pytest.mark.asyncio
    async def test_invalidated_entry_refetches_before_returning(self, cache: QueryCache) -> None:
        fetcher = CountingFetcher("v1", "v2")
        await cache.read("k", fetcher)

        assert cache.invalidate("k") is True
        result = await cache.read("k", fetcher)

        assert result.data == "v2"
        assert not result.is_stale

    def test_invalidating_unknown_key(self, cache: QueryCache) -> None:
        assert cache.invalidate("missing") is False

    @pytest.mark.asyncio
    async def test_latest_dispatched_fetch_wins(self, cache: QueryCache) -> None:
        """A fetch started before an invalidation never overwrites a newer one."""
        slow_gate = asyncio.Event()
        slow = CountingFetcher("old", gate=slow_gate)
        fast = CountingFetcher("new")

        first_reader = asyncio.create_task(cache.read("k", slow))
        await settle()
        cache.invalidate("k")
        second = await cache.read("k", fast)
        slow_gate.set()
        first = await first_reader

        assert second.data == "new"
        assert first.data == "old"
        assert cache.peek("k").data == "new"

    @pytest.mark.asyncio
    async def test_invalidate_path_matches_all_parameters(self, cache: QueryCache) -> None:
        for key in ("/api/messages/1", "/api/messages/1?limit=5", "/api/messages/12"):
            await cache.read(key, CountingFetcher("x"))

        assert cache.invalidate_path("/api/messages/1") == 2
        assert cache.peek("/api/messages/12").is_stale is False

    @pytest.mark.asyncio
    async def test_invalidate_prefix(self, cache: QueryCache) -> None:
        for key in ("/api/messages", "/api/messages/conversations", "/api/jobs"):
            await cache.read(key, CountingFetcher("x"))

        assert cache.invalidate_prefix("/api/messages") == 2
        assert cache.peek("/api/jobs").is_stale is False


class TestCancellation:
    """Tests for cancel and clear."""

    @pytest.mark.asyncio
    async def test_cancelled_read_reports_error(self, cache: QueryCache) -> None:
        fetcher = CountingFetcher("never", gate=asyncio.Event())
        reader = asyncio.create_task(cache.read("k", fetcher))
        await settle()

        assert cache.cancel(["k"]) == 1
        result = await reader

        assert isinstance(result.error, QueryCancelledError)
        assert result.data is None
        assert cache.peek("k") is None

    @pytest.mark.asyncio
    async def test_cancel_ignores_idle_keys(self, cache: QueryCache) -> None:
        await cache.read("k", CountingFetcher("v"))

        assert cache.cancel(["k", "unknown"]) == 0

    @pytest.mark.asyncio
    async def test_release_keeps_awaited_fetch(self, cache: QueryCache) -> None:
        gate = asyncio.Event()
        reader = asyncio.create_task(cache.read("k", CountingFetcher("shared", gate=gate)))
        await settle()

        assert cache.release(["k"]) == 0
        gate.set()
        result = await reader

        assert result.data == "shared"
        assert cache.peek("k").data == "shared"

    @pytest.mark.asyncio
    async def test_release_stops_unawaited_refetch(self, cache: QueryCache, clock: FakeClock) -> None:
        await cache.read("k", CountingFetcher("old"))
        clock.advance(120)
        stale = await cache.read("k", CountingFetcher("new", gate=asyncio.Event()))

        assert stale.is_stale
        assert cache.release(["k"]) == 1
        await settle()
        assert cache.peek("k").data == "old"

    @pytest.mark.asyncio
    async def test_clear_drops_everything(self, cache: QueryCache) -> None:
        await cache.read("a", CountingFetcher(1))
        await cache.read("b", CountingFetcher(2))

        assert cache.clear() == 2
        assert cache.peek("a") is None
        assert cache.get_stats()["total_entries"] == 0


class TestQueryCacheConfig:
    """Tests for QueryCacheConfig.from_settings."""

    def test_from_settings(self) -> None:
        from src.core.config import ClientSettings

        settings = ClientSettings(_env_file=None, list_stale_seconds=30, chat_poll_seconds=5)

        config = QueryCacheConfig.from_settings(settings)

        assert config.default_stale_seconds == 30
        assert config.poll_interval_seconds == 5
