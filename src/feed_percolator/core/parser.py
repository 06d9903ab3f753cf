"""
Syndication document parser.

Turns raw feed bytes into a FeedDocument of normalized FeedItems. Documents are
first offered to the legacy RSS 1.0 reader; anything else goes through the
generic reader, which understands the RSS 2.0 family and Atom 1.0.
"""

import re
from datetime import datetime, timezone
from html import unescape
from typing import Optional

import feedparser
from bs4 import BeautifulSoup

from feed_percolator.exceptions import SourceFetchError
from feed_percolator.logger import get_logger
from feed_percolator.models import ALTERNATE, FeedDocument, FeedItem, FeedLink

logger = get_logger(__name__)

LEGACY_FORMAT = "rss10"

# Formats the generic reader accepts
GENERIC_FORMATS = ("rss090", "rss091n", "rss091u", "rss092", "rss093", "rss094", "rss20", "rss", "atom10")

# bozo exceptions that do not make a document unreadable
_BENIGN_BOZO = (feedparser.CharacterEncodingOverride,)


class FeedParser:
    """Parser for syndication documents."""

    def parse(self, content: bytes, url: str) -> FeedDocument:
        """Parse a raw document.

        Args:
            content: Response body
            url: Source URL, used for error reporting and item provenance

        Returns:
            FeedDocument with normalized items

        Raises:
            SourceFetchError: If the document is malformed or in an unsupported format
        """
        parsed = feedparser.parse(content)

        if parsed.get("bozo"):
            exc = parsed.get("bozo_exception")
            if not isinstance(exc, _BENIGN_BOZO):
                raise SourceFetchError(url, f"malformed feed: {exc}")

        version = parsed.get("version") or ""

        if self._read_legacy(version):
            logger.debug(f"Reading {url} as legacy RSS 1.0")
        elif self._read_generic(version):
            logger.debug(f"Reading {url} as {version}")
        else:
            raise SourceFetchError(url, f"unsupported feed format: {version or 'unknown'}")

        feed = parsed.get("feed", {})
        feed_language = self._normalize_language(feed.get("language"))

        items = [
            self.parse_entry(entry, source_url=url, default_language=feed_language)
            for entry in parsed.get("entries", [])
        ]

        return FeedDocument(
            url=url,
            format=version,
            title=self._normalize_title(feed.get("title")),
            items=items,
        )

    def _read_legacy(self, version: str) -> bool:
        return version == LEGACY_FORMAT

    def _read_generic(self, version: str) -> bool:
        return version in GENERIC_FORMATS

    def parse_entry(
        self,
        raw_entry: dict,
        source_url: Optional[str] = None,
        default_language: Optional[str] = None,
    ) -> FeedItem:
        """Map a raw feedparser entry to a FeedItem.

        Args:
            raw_entry: Raw entry from feedparser
            source_url: URL of the document the entry came from
            default_language: Feed-level language used when the entry has none

        Returns:
            FeedItem
        """
        summary = raw_entry.get("summary") or raw_entry.get("description")

        return FeedItem(
            id=self._normalize_id(raw_entry.get("id") or raw_entry.get("guid")),
            title=self._normalize_title(raw_entry.get("title")),
            links=self._extract_links(raw_entry),
            published=self._parse_date(
                raw_entry.get("published_parsed") or raw_entry.get("updated_parsed")
            ),
            updated=self._parse_date(raw_entry.get("updated_parsed")),
            summary=summary.strip() if summary else None,
            content=self._extract_content(raw_entry) or (summary.strip() if summary else None),
            author=self._normalize_author(raw_entry.get("author")),
            tags=self._extract_tags(raw_entry),
            language=self._normalize_language(raw_entry.get("language")) or default_language,
            source_url=source_url,
        )

    def _normalize_id(self, entry_id: Optional[str]) -> Optional[str]:
        if not entry_id:
            return None
        entry_id = str(entry_id).strip()
        return entry_id if entry_id else None

    def _normalize_title(self, title: Optional[str]) -> Optional[str]:
        """Normalize a title to plain text.

        Args:
            title: Raw title, possibly containing markup

        Returns:
            Plain text title, or None when empty
        """
        if not title:
            return None

        title = str(title)
        if "<" in title:
            title = BeautifulSoup(title, "html.parser").get_text()

        title = unescape(title)
        title = re.sub(r"\s+", " ", title.strip())

        return title if title else None

    def _normalize_author(self, author) -> Optional[str]:
        if not author:
            return None

        # Handle dict format (some feeds)
        if isinstance(author, dict):
            author = author.get("name") or author.get("email")
            if not author:
                return None

        author = unescape(str(author)).strip()
        return author if author else None

    def _normalize_language(self, language: Optional[str]) -> Optional[str]:
        # "en-US" -> "en"
        if not language:
            return None
        language = str(language).split("-")[0].strip().lower()
        return language if language else None

    def _extract_links(self, raw_entry: dict) -> tuple[FeedLink, ...]:
        """Extract links, falling back to the bare ``link`` field.

        Args:
            raw_entry: Raw entry from feedparser

        Returns:
            Tuple of FeedLink in document order
        """
        links = []
        for raw_link in raw_entry.get("links") or []:
            href = (raw_link.get("href") or "").strip()
            if not href:
                continue
            links.append(
                FeedLink(
                    href=href,
                    rel=raw_link.get("rel") or ALTERNATE,
                    media_type=raw_link.get("type"),
                    title=raw_link.get("title"),
                )
            )

        if not links:
            href = (raw_entry.get("link") or "").strip()
            if href:
                links.append(FeedLink(href=href))

        return tuple(links)

    def _extract_content(self, raw_entry: dict) -> Optional[str]:
        contents = raw_entry.get("content") or []
        for content in contents:
            value = content.get("value")
            if value and value.strip():
                return value.strip()
        return None

    def _extract_tags(self, raw_entry: dict) -> tuple[str, ...]:
        """Extract tag terms, lowercased and without duplicates."""
        tags = []
        for tag in raw_entry.get("tags") or []:
            term = tag.get("term") if isinstance(tag, dict) else tag
            if term:
                term = str(term).strip().lower()
                if term and term not in tags:
                    tags.append(term)
        return tuple(tags)

    def _parse_date(self, parsed_time) -> Optional[datetime]:
        """Convert a feedparser UTC time tuple to an aware datetime.

        Args:
            parsed_time: time.struct_time from feedparser, or None

        Returns:
            datetime in UTC, or None
        """
        if not parsed_time:
            return None

        try:
            return datetime(*parsed_time[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            logger.warning(f"Failed to convert date: {parsed_time}")
            return None


def create_parser() -> FeedParser:
    """Create a FeedParser instance.

    Returns:
        FeedParser instance
    """
    return FeedParser()
