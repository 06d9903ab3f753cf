"""
Streaming deduplicator for feed items.

An item survives only if it is new on all three identity keys: id (exact),
title (case-insensitive) and alternate link URI.
"""

from enum import Enum
from typing import Iterable, Iterator, Optional

import httpx

from feed_percolator.exceptions import IdentityFieldError
from feed_percolator.logger import get_logger
from feed_percolator.models import FeedItem

logger = get_logger(__name__)


class MissingTitlePolicy(str, Enum):
    """How items without a title are deduplicated."""

    UNIQUE = "unique"  # title check is skipped
    ERROR = "error"  # IdentityFieldError


class Deduplicator:
    """Removes items already seen under any identity key.

    The seen-sets live as long as the instance; use one instance per run.
    """

    def __init__(self, missing_title_policy: MissingTitlePolicy = MissingTitlePolicy.UNIQUE) -> None:
        """Initialize deduplicator.

        Args:
            missing_title_policy: Handling of items without a title
        """
        self.missing_title_policy = MissingTitlePolicy(missing_title_policy)

        self._seen_ids: set[str] = set()
        self._seen_titles: set[str] = set()
        self._seen_links: set[str] = set()

    @staticmethod
    def _add(seen: set[str], key: Optional[str]) -> bool:
        # True when the key is new; a missing key is always new
        if key is None:
            return True
        if key in seen:
            return False
        seen.add(key)
        return True

    def _title_key(self, item: FeedItem) -> Optional[str]:
        title = item.title.strip() if item.title else ""
        if title:
            return title.casefold()

        if self.missing_title_policy is MissingTitlePolicy.ERROR:
            raise IdentityFieldError("title", item.id)
        return None

    @staticmethod
    def _link_key(href: str) -> str:
        # URI equality: scheme and host compare case-insensitively, default ports drop out
        try:
            return str(httpx.URL(href.strip()))
        except httpx.InvalidURL:
            return href.strip()

    def is_new(self, item: FeedItem) -> bool:
        """Record the item's keys and report whether it is new on all of them.

        Checks short-circuit: a duplicate id leaves the title unrecorded, and
        a duplicate title leaves the link unrecorded.

        Args:
            item: Item to check

        Returns:
            True if the item should be kept
        """
        if not (self._add(self._seen_ids, item.id) and self._add(self._seen_titles, self._title_key(item))):
            return False

        link = item.alternate_link
        return link is None or self._add(self._seen_links, self._link_key(link.href))

    def dedup(self, items: Iterable[FeedItem]) -> Iterator[FeedItem]:
        """Lazily yield the items that are new, in encounter order.

        Args:
            items: Items to deduplicate

        Yields:
            Unique items
        """
        for item in items:
            if self.is_new(item):
                yield item
            else:
                logger.trace(f"Dropped duplicate: {item!r}")


def deduplicate(
    items: Iterable[FeedItem],
    missing_title_policy: MissingTitlePolicy = MissingTitlePolicy.UNIQUE,
) -> Iterator[FeedItem]:
    """Deduplicate items with a fresh Deduplicator.

    Args:
        items: Items to deduplicate
        missing_title_policy: Handling of items without a title

    Returns:
        Lazy iterator of unique items
    """
    return Deduplicator(missing_title_policy).dedup(items)
