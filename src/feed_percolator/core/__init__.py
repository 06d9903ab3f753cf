"""Core pipeline modules for feed percolator.

The pipeline evaluator is the main entry point:

    from feed_percolator.core import PipelineEvaluator
    from feed_percolator.models import PipelineSettings

    settings = PipelineSettings(
        inputs=["https://example.com/feed.xml"],
        output="merged.xml",
        title="My Feed",
    )
    PipelineEvaluator.create().execute(filters=None, settings=settings)
"""

from feed_percolator.core.deduplicator import Deduplicator, MissingTitlePolicy, deduplicate
from feed_percolator.core.fetcher import FeedFetcher, FetchStats, create_http_client
from feed_percolator.core.filter_engine import (
    Filter,
    FilterAction,
    FilterChain,
    KeywordFilter,
    LanguageFilter,
    RegexFilter,
    TagFilter,
    apply_filters,
    create_filters,
)
from feed_percolator.core.merger import merge_items
from feed_percolator.core.parser import FeedParser
from feed_percolator.core.pipeline import PipelineEvaluator, PipelineResult, create_pipeline_evaluator
from feed_percolator.core.writer import AtomWriter

__all__ = [
    "PipelineEvaluator",
    "PipelineResult",
    "create_pipeline_evaluator",
    "FeedFetcher",
    "FetchStats",
    "create_http_client",
    "FeedParser",
    "Filter",
    "FilterAction",
    "FilterChain",
    "KeywordFilter",
    "RegexFilter",
    "TagFilter",
    "LanguageFilter",
    "apply_filters",
    "create_filters",
    "Deduplicator",
    "MissingTitlePolicy",
    "deduplicate",
    "merge_items",
    "AtomWriter",
]
