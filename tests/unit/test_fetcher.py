"""Unit tests for the concurrent feed fetcher."""

import asyncio
import time

import httpx
import pytest

from feed_percolator.config import FetcherConfig
from feed_percolator.core.fetcher import FeedFetcher, FetchStats, create_http_client
from feed_percolator.exceptions import SourceFetchError
from feed_percolator.models import FeedDocument

URL_A = "http://a.example.com/feed.xml"
URL_B = "http://b.example.com/feed.xml"
URL_C = "http://c.example.com/feed.xml"


def run_fetch(transport: httpx.AsyncBaseTransport, coro_factory, **fetcher_kwargs):
    """Run a fetcher coroutine against a client built on ``transport``."""

    async def _run():
        async with create_http_client(FetcherConfig(), transport=transport) as client:
            fetcher = FeedFetcher(client, **fetcher_kwargs)
            result = await coro_factory(fetcher)
            return fetcher, result

    return asyncio.run(_run())


class TestFetchStats:
    """Tests for FetchStats dataclass."""

    def test_add_document(self, make_item):
        """Test adding documents to statistics."""
        stats = FetchStats()
        stats.add_document(FeedDocument(url=URL_A, format="rss20", items=[make_item(), make_item(id="2")]))
        stats.add_document(FeedDocument(url=URL_B, format="atom10"))

        assert stats.total_sources == 2
        assert stats.total_items == 2
        assert stats.avg_items_per_source == 1.0

    def test_empty_stats(self):
        """Test averages without documents."""
        assert FetchStats().avg_items_per_source == 0.0


class TestCreateHttpClient:
    """Tests for the shared client factory."""

    def test_client_uses_config(self):
        """Test that configured headers and redirects are applied."""
        config = FetcherConfig(user_agent="TestAgent/1.0", follow_redirects=False)
        client = create_http_client(config)

        try:
            assert client.headers["User-Agent"] == "TestAgent/1.0"
            assert client.follow_redirects is False
        finally:
            asyncio.run(client.aclose())


class TestFeedFetcher:
    """Tests for FeedFetcher."""

    def test_fetch_feed(self, feed_transport, sample_feeds):
        """Test fetching and parsing one source."""
        transport = feed_transport({URL_A: sample_feeds["rss20"]})

        fetcher, document = run_fetch(transport, lambda f: f.fetch_feed(URL_A))

        assert document.url == URL_A
        assert len(document.items) == 2
        assert fetcher.stats.total_sources == 1
        assert fetcher.stats.total_items == 2

    def test_fetch_items_flattens_sources(self, feed_transport, sample_feeds):
        """Test that items of all sources are flattened in source order."""
        transport = feed_transport({URL_A: sample_feeds["rss20"], URL_B: sample_feeds["atom"]})

        _, items = run_fetch(transport, lambda f: f.fetch_items([URL_A, URL_B]))

        assert [item.id for item in items] == ["a-1", "a-2", "urn:example:atom:1"]

    def test_fetch_all_empty(self, feed_transport):
        """Test fetching no sources."""
        _, documents = run_fetch(feed_transport({}), lambda f: f.fetch_all([]))

        assert documents == []

    def test_http_error(self, feed_transport):
        """Test that an HTTP error status fails the fetch."""
        transport = feed_transport({URL_A: 503})

        with pytest.raises(SourceFetchError) as exc_info:
            run_fetch(transport, lambda f: f.fetch_feed(URL_A))

        assert exc_info.value.url == URL_A
        assert exc_info.value.reason == "HTTP 503"

    def test_network_error(self, feed_transport):
        """Test that a connection failure fails the fetch."""
        transport = feed_transport({URL_A: httpx.ConnectError("connection refused")})

        with pytest.raises(SourceFetchError) as exc_info:
            run_fetch(transport, lambda f: f.fetch_feed(URL_A))

        assert "Request error" in exc_info.value.reason
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self, feed_transport):
        """Test that a timeout fails the fetch."""
        transport = feed_transport({URL_A: httpx.ReadTimeout("too slow")})

        with pytest.raises(SourceFetchError) as exc_info:
            run_fetch(transport, lambda f: f.fetch_feed(URL_A))

        assert exc_info.value.reason.startswith("Timeout")

    def test_parse_error(self, feed_transport, sample_feeds):
        """Test that an unparsable body fails the fetch."""
        transport = feed_transport({URL_A: sample_feeds["malformed"]})

        with pytest.raises(SourceFetchError):
            run_fetch(transport, lambda f: f.fetch_feed(URL_A))

    def test_one_failing_source_fails_batch(self, feed_transport, sample_feeds):
        """Test that the batch is all-or-nothing."""
        transport = feed_transport({
            URL_A: sample_feeds["rss20"],
            URL_B: httpx.ConnectError("unreachable"),
            URL_C: sample_feeds["atom"],
        })

        with pytest.raises(SourceFetchError) as exc_info:
            run_fetch(transport, lambda f: f.fetch_items([URL_A, URL_B, URL_C]))

        assert exc_info.value.url == URL_B

    def test_fast_failure_does_not_wait_for_slow_source(self):
        """Test that the first failure aborts the batch while other sources are in flight."""

        async def handler(request):
            if request.url.host == "a.example.com":
                raise httpx.ConnectError("unreachable", request=request)
            await asyncio.sleep(5)
            return httpx.Response(200)

        start = time.monotonic()
        with pytest.raises(SourceFetchError) as exc_info:
            run_fetch(httpx.MockTransport(handler), lambda f: f.fetch_all([URL_A, URL_B]))

        assert exc_info.value.url == URL_A
        assert time.monotonic() - start < 2

    def test_fetch_all_records_stats(self, feed_transport, sample_feeds):
        """Test that a batch accumulates sources, items and elapsed time."""
        transport = feed_transport({URL_A: sample_feeds["rss20"], URL_B: sample_feeds["atom"]})

        fetcher, _ = run_fetch(transport, lambda f: f.fetch_all([URL_A, URL_B]))

        assert fetcher.stats.total_sources == 2
        assert fetcher.stats.total_items == 3
        assert fetcher.stats.avg_items_per_source == 1.5
        assert fetcher.stats.total_time_seconds >= 0


class TestConcurrency:
    """Tests for concurrent scheduling."""

    @staticmethod
    def _tracking_transport(body: bytes):
        state = {"in_flight": 0, "max_in_flight": 0, "requests": 0}

        async def handler(request: httpx.Request) -> httpx.Response:
            state["requests"] += 1
            state["in_flight"] += 1
            state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
            await asyncio.sleep(0.05)
            state["in_flight"] -= 1
            return httpx.Response(200, content=body)

        return httpx.MockTransport(handler), state

    def test_sources_fetched_in_parallel(self, sample_feeds):
        """Test that every source is requested at once by default."""
        transport, state = self._tracking_transport(sample_feeds["atom"])
        urls = [f"http://s{i}.example.com/feed" for i in range(5)]

        _, documents = run_fetch(transport, lambda f: f.fetch_all(urls))

        assert len(documents) == 5
        assert state["requests"] == 5
        assert state["max_in_flight"] == 5

    def test_concurrency_cap(self, sample_feeds):
        """Test that max_concurrency limits in-flight requests."""
        transport, state = self._tracking_transport(sample_feeds["atom"])
        urls = [f"http://s{i}.example.com/feed" for i in range(4)]

        _, documents = run_fetch(transport, lambda f: f.fetch_all(urls), max_concurrency=2)

        assert len(documents) == 4
        assert state["max_in_flight"] == 2

    def test_results_keep_url_order(self, sample_feeds):
        """Test that documents come back in URL order regardless of timing."""

        async def handler(request: httpx.Request) -> httpx.Response:
            # Earlier URLs answer later
            delay = {"a": 0.06, "b": 0.03, "c": 0.0}[request.url.host[0]]
            await asyncio.sleep(delay)
            return httpx.Response(200, content=sample_feeds["atom"])

        urls = [URL_A, URL_B, URL_C]
        _, documents = run_fetch(httpx.MockTransport(handler), lambda f: f.fetch_all(urls))

        assert [d.url for d in documents] == urls
