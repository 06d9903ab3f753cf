"""
Pipeline evaluator.

Runs one full pass: crawl -> filter -> dedup -> merge -> write. Filters are
always executed from first to last, so put broad filters at the beginning.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

import httpx

from feed_percolator.config import Config, get_config
from feed_percolator.core.factories import create_deduplicator, create_fetcher, create_filter_chain
from feed_percolator.core.fetcher import FetchStats, create_http_client
from feed_percolator.core.filter_engine import FilterLike
from feed_percolator.core.merger import merge_items
from feed_percolator.core.writer import AtomWriter
from feed_percolator.exceptions import PercolatorError
from feed_percolator.logger import get_logger
from feed_percolator.models import FeedItem, PipelineSettings

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a successful run."""

    fetched: int = 0
    included: int = 0
    unique: int = 0
    written: bool = False
    items: list[FeedItem] = field(default_factory=list)
    fetch_stats: FetchStats = field(default_factory=FetchStats)


class PipelineEvaluator:
    """Executes a pipeline.

    Not safe to call from inside a running event loop: the crawl is driven
    with ``asyncio.run``.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        writer: Optional[AtomWriter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize pipeline evaluator.

        Args:
            config: Configuration, defaults to the global one
            writer: Output serializer
            transport: HTTP transport override for the shared client
        """
        self.config = config or get_config()
        self.writer = writer or AtomWriter()
        self.transport = transport

    @classmethod
    def create(cls, config: Optional[Config] = None) -> "PipelineEvaluator":
        return cls(config=config)

    def execute(
        self,
        filters: Optional[Sequence[FilterLike]],
        settings: PipelineSettings,
    ) -> PipelineResult:
        """Run the pipeline once.

        Args:
            filters: Ordered filters, may be None
            settings: Run configuration

        Returns:
            PipelineResult with stage counts and the merged items

        Raises:
            PercolatorError: On any failure; nothing is written in that case
        """
        result = PipelineResult()

        try:
            items = self._crawl(settings.inputs, result) if settings.inputs else []
            result.fetched = len(items)

            chain = create_filter_chain(filters, settings.filters)
            filtered = self._count(chain.filter(items), result, "included")

            deduplicator = create_deduplicator(self.config)
            merged = merge_items(deduplicator.dedup(filtered))
            result.unique = len(merged)
            result.items = merged

            logger.info(
                f"Pipeline: {result.fetched} fetched, {result.included} included, "
                f"{result.unique} unique"
            )

            if settings.output is not None:
                self.writer.write(
                    merged,
                    settings.output,
                    title=settings.title or self.config.output.title,
                    description=settings.description or self.config.output.description,
                )
                result.written = True

        except PercolatorError as e:
            logger.error(f"Pipeline failed: {e}")
            raise

        return result

    def _crawl(self, urls: Iterable[str], result: PipelineResult) -> list[FeedItem]:
        return asyncio.run(self._crawl_async(list(urls), result))

    async def _crawl_async(self, urls: list[str], result: PipelineResult) -> list[FeedItem]:
        # One pooled client per run, shared by every fetch task
        async with create_http_client(self.config.fetcher, transport=self.transport) as client:
            fetcher = create_fetcher(client, self.config)
            result.fetch_stats = fetcher.stats
            return await fetcher.fetch_items(urls)

    @staticmethod
    def _count(items: Iterable[FeedItem], result: PipelineResult, attr: str) -> Iterator[FeedItem]:
        for item in items:
            setattr(result, attr, getattr(result, attr) + 1)
            yield item


def create_pipeline_evaluator(config: Optional[Config] = None) -> PipelineEvaluator:
    """Create a configured PipelineEvaluator instance.

    Args:
        config: Optional configuration

    Returns:
        Configured PipelineEvaluator instance
    """
    return PipelineEvaluator.create(config)
