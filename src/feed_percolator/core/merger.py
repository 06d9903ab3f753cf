"""Chronological merge of the surviving items."""

from datetime import datetime, timezone
from typing import Iterable

from feed_percolator.models import FeedItem

# Items without a publish time sort before everything else
_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def publish_time(item: FeedItem) -> datetime:
    """Sort key: the item's publish time, naive values taken as UTC."""
    published = item.published
    if published is None:
        return _EARLIEST
    if published.tzinfo is None:
        return published.replace(tzinfo=timezone.utc)
    return published


def merge_items(items: Iterable[FeedItem]) -> list[FeedItem]:
    """Materialize the items, ordered by publish time ascending.

    The sort is stable, so items with equal timestamps keep encounter order.

    Args:
        items: Deduplicated items

    Returns:
        Sorted list of items
    """
    return sorted(items, key=publish_time)
