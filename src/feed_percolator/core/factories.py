"""
Factory functions for creating core components from the config system.

Usage:
    from feed_percolator.core.factories import (
        create_fetcher,
        create_deduplicator,
        create_filter_chain,
    )

    # Create with default configuration
    deduplicator = create_deduplicator()

    # Create with overrides
    deduplicator = create_deduplicator(missing_title_policy="error")
"""

from typing import Iterable, Optional, Sequence

import httpx

from feed_percolator.config import Config, get_config
from feed_percolator.core.deduplicator import Deduplicator, MissingTitlePolicy
from feed_percolator.core.fetcher import FeedFetcher
from feed_percolator.core.filter_engine import FilterChain, FilterLike, create_filters
from feed_percolator.core.parser import FeedParser
from feed_percolator.models import FilterRule


def create_fetcher(
    client: httpx.AsyncClient,
    config: Optional[Config] = None,
    max_concurrency: Optional[int] = None,
) -> FeedFetcher:
    """Create a configured FeedFetcher instance.

    Args:
        client: Shared HTTP client for the run
        config: Configuration, defaults to the global one
        max_concurrency: Override configured concurrency cap

    Returns:
        Configured FeedFetcher instance
    """
    config = config or get_config()
    if max_concurrency is None:
        max_concurrency = config.fetcher.max_concurrency

    return FeedFetcher(client, parser=FeedParser(), max_concurrency=max_concurrency)


def create_deduplicator(
    config: Optional[Config] = None,
    missing_title_policy: Optional[str] = None,
) -> Deduplicator:
    """Create a Deduplicator with fresh seen-sets.

    Args:
        config: Configuration, defaults to the global one
        missing_title_policy: Override configured policy ("unique" or "error")

    Returns:
        Configured Deduplicator instance
    """
    config = config or get_config()
    policy = missing_title_policy or config.deduplicator.missing_title_policy
    return Deduplicator(MissingTitlePolicy(policy))


def create_filter_chain(
    filters: Optional[Sequence[FilterLike]] = None,
    rules: Optional[Iterable[FilterRule]] = None,
) -> FilterChain:
    """Create a FilterChain from filter objects and rule definitions.

    Rule filters run after the given filters, so they take priority.

    Args:
        filters: Filter objects or callables
        rules: Rule definitions

    Returns:
        FilterChain instance
    """
    chain = list(filters or [])
    chain.extend(create_filters(rules or []))
    return FilterChain(chain)
