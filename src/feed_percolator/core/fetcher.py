"""
Concurrent syndication source fetcher.

Every source is requested at once over one shared HTTP client. The batch is
all-or-nothing: the first source that fails aborts the whole fetch.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable, Optional

import httpx

from feed_percolator.config import FetcherConfig, get_config
from feed_percolator.core.parser import FeedParser
from feed_percolator.exceptions import SourceFetchError
from feed_percolator.logger import get_logger
from feed_percolator.models import FeedDocument, FeedItem

logger = get_logger(__name__)


@dataclass
class FetchStats:
    """Statistics for one fetch batch."""

    total_sources: int = 0
    total_items: int = 0
    total_time_seconds: float = 0.0

    def add_document(self, document: FeedDocument) -> None:
        """Add a fetched document to statistics.

        Args:
            document: FeedDocument that was fetched
        """
        self.total_sources += 1
        self.total_items += len(document.items)

    @property
    def avg_items_per_source(self) -> float:
        """Average number of items per source."""
        if self.total_sources == 0:
            return 0.0
        return self.total_items / self.total_sources


def create_http_client(
    config: Optional[FetcherConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create the pooled HTTP client shared by all fetch tasks of a run.

    Args:
        config: Fetcher configuration, defaults to the global one
        transport: Optional transport override (used by tests)

    Returns:
        Configured httpx.AsyncClient
    """
    config = config or get_config().fetcher

    return httpx.AsyncClient(
        timeout=config.timeout_seconds,
        headers={"User-Agent": config.user_agent},
        follow_redirects=config.follow_redirects,
        max_redirects=config.max_redirects,
        transport=transport,
    )


class FeedFetcher:
    """Fetches and parses sources concurrently."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        parser: Optional[FeedParser] = None,
        max_concurrency: int = 0,
    ):
        """Initialize feed fetcher.

        Args:
            client: Shared HTTP client; its lifetime is managed by the caller
            parser: Document parser
            max_concurrency: Max in-flight requests, 0 for unlimited
        """
        self.client = client
        self.parser = parser or FeedParser()
        self.max_concurrency = max_concurrency
        self.stats = FetchStats()

    async def fetch_feed(self, url: str) -> FeedDocument:
        """Fetch and parse a single source.

        Args:
            url: Source URL

        Returns:
            Parsed FeedDocument

        Raises:
            SourceFetchError: On network, HTTP or parse failure
        """
        logger.debug(f"Fetching feed: {url}")

        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SourceFetchError(url, f"Timeout: {e}") from e
        except httpx.HTTPStatusError as e:
            raise SourceFetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise SourceFetchError(url, f"Request error: {e}") from e

        document = self.parser.parse(response.content, url)
        self.stats.add_document(document)

        logger.debug(f"Fetched {len(document.items)} items from {url}")
        return document

    async def fetch_all(self, urls: Iterable[str]) -> list[FeedDocument]:
        """Fetch every source concurrently.

        One task is launched per URL. The join fails fast: the first error
        propagates and the remaining results are discarded.

        Args:
            urls: Source URLs

        Returns:
            Parsed documents in URL order
        """
        urls = list(urls)
        start_time = time.time()

        if self.max_concurrency > 0:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def fetch_one(url: str) -> FeedDocument:
                async with semaphore:
                    return await self.fetch_feed(url)
        else:
            fetch_one = self.fetch_feed

        tasks = [asyncio.create_task(fetch_one(url)) for url in urls]
        try:
            documents = await asyncio.gather(*tasks)
        except Exception:
            # Results of the other sources are discarded
            for task in tasks:
                task.cancel()
            raise

        elapsed = time.time() - start_time
        self.stats.total_time_seconds += elapsed

        logger.info(
            f"Fetched {self.stats.total_items} items from {self.stats.total_sources} sources "
            f"({self.stats.avg_items_per_source:.1f} per source) in {elapsed:.2f}s"
        )
        return documents

    async def fetch_items(self, urls: Iterable[str]) -> list[FeedItem]:
        """Fetch every source and flatten all items into one list.

        Args:
            urls: Source URLs

        Returns:
            Items of all sources, source by source
        """
        documents = await self.fetch_all(urls)
        return [item for document in documents for item in document.items]
