"""Data models for feed percolator."""

from feed_percolator.models.item import ALTERNATE, FeedDocument, FeedItem, FeedLink
from feed_percolator.models.settings import FilterRule, PipelineSettings

__all__ = [
    "ALTERNATE",
    "FeedDocument",
    "FeedItem",
    "FeedLink",
    "FilterRule",
    "PipelineSettings",
]
