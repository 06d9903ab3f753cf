"""
Feed item data model.

Items are produced by the parser and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ALTERNATE = "alternate"


@dataclass(frozen=True)
class FeedLink:
    """An outbound link of a feed item."""

    href: str
    rel: str = ALTERNATE
    media_type: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class FeedItem:
    """One syndication entry.

    ``id``, ``title`` and the alternate link are the identity fields used for
    deduplication. ``published`` is timezone-aware UTC when present.
    """

    id: Optional[str]
    title: Optional[str]
    links: tuple[FeedLink, ...] = ()
    published: Optional[datetime] = None
    updated: Optional[datetime] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    tags: tuple[str, ...] = ()
    language: Optional[str] = None
    source_url: Optional[str] = None

    @property
    def alternate_link(self) -> Optional[FeedLink]:
        """First link tagged ``alternate``, if any."""
        for link in self.links:
            if link.rel == ALTERNATE:
                return link
        return None

    def __repr__(self) -> str:
        return f"<FeedItem(id={self.id!r}, title={self.title!r}, published={self.published})>"


@dataclass
class FeedDocument:
    """A parsed syndication document from one source."""

    url: str
    format: str
    title: Optional[str] = None
    items: list[FeedItem] = field(default_factory=list)

    @property
    def is_legacy(self) -> bool:
        """Whether the document was read with the legacy RSS 1.0 reader."""
        return self.format == "rss10"
