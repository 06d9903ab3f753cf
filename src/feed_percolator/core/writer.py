"""
Atom 1.0 writer for the merged feed.

Path targets are replaced atomically, so a failed write never leaves a
partial document behind.
"""

import io
import os
import tempfile
import uuid
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from feed_percolator.exceptions import OutputWriteError
from feed_percolator.logger import get_logger
from feed_percolator.models import FeedItem

logger = get_logger(__name__)

ATOM_NS = "http://www.w3.org/2005/Atom"

ET.register_namespace("", ATOM_NS)


def _tag(name: str) -> str:
    return f"{{{ATOM_NS}}}{name}"


def _timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _text(parent: ET.Element, name: str, text: str, content_type: Optional[str] = None) -> ET.Element:
    element = ET.SubElement(parent, _tag(name))
    if content_type:
        element.set("type", content_type)
    element.text = text
    return element


class AtomWriter:
    """Serializes items into an Atom 1.0 document."""

    def build(
        self,
        items: Iterable[FeedItem],
        title: str,
        description: str,
        updated: datetime,
        feed_id: Optional[str] = None,
    ) -> ET.ElementTree:
        """Build the document tree.

        Args:
            items: Items in output order
            title: Plaintext feed title
            description: Plaintext feed description
            updated: Last-updated time of the feed
            feed_id: Feed id, a fresh urn:uuid when omitted

        Returns:
            ElementTree of the feed
        """
        feed = ET.Element(_tag("feed"))
        _text(feed, "title", title, "text")
        _text(feed, "subtitle", description, "text")
        _text(feed, "id", feed_id or uuid.uuid4().urn)
        _text(feed, "updated", _timestamp(updated))

        for item in items:
            self._add_entry(feed, item, updated)

        tree = ET.ElementTree(feed)
        ET.indent(tree)
        return tree

    def _add_entry(self, feed: ET.Element, item: FeedItem, feed_updated: datetime) -> None:
        entry = ET.SubElement(feed, _tag("entry"))

        link = item.alternate_link
        entry_id = item.id or (link.href if link else uuid.uuid4().urn)

        _text(entry, "id", entry_id)
        _text(entry, "title", item.title or "", "text")
        _text(entry, "updated", _timestamp(item.updated or item.published or feed_updated))
        if item.published:
            _text(entry, "published", _timestamp(item.published))

        for feed_link in item.links:
            element = ET.SubElement(entry, _tag("link"), rel=feed_link.rel, href=feed_link.href)
            if feed_link.media_type:
                element.set("type", feed_link.media_type)
            if feed_link.title:
                element.set("title", feed_link.title)

        if item.author:
            author = ET.SubElement(entry, _tag("author"))
            _text(author, "name", item.author)

        for tag in item.tags:
            ET.SubElement(entry, _tag("category"), term=tag)

        if item.summary:
            _text(entry, "summary", item.summary, "html")
        if item.content:
            _text(entry, "content", item.content, "html")

    def write(
        self,
        items: Iterable[FeedItem],
        target: Any,
        title: str,
        description: str,
        updated: Optional[datetime] = None,
    ) -> None:
        """Serialize items to a path or a writable stream.

        Args:
            items: Items in output order
            target: File path or writable stream (text or binary)
            title: Plaintext feed title
            description: Plaintext feed description
            updated: Last-updated time, defaults to now

        Raises:
            OutputWriteError: If serialization or persistence fails
        """
        updated = updated or datetime.now(timezone.utc)

        try:
            tree = self.build(items, title, description, updated)
            if isinstance(target, (str, Path)):
                self._write_file(tree, Path(target))
            else:
                self._write_stream(tree, target)
        except OutputWriteError:
            raise
        except (OSError, ValueError, TypeError) as e:
            raise OutputWriteError(target, f"{type(e).__name__}: {e}") from e

        logger.info(f"Wrote feed to {target}")

    def _write_stream(self, tree: ET.ElementTree, stream: Any) -> None:
        if isinstance(stream, io.TextIOBase):
            tree.write(stream, encoding="unicode", xml_declaration=True)
        else:
            tree.write(stream, encoding="utf-8", xml_declaration=True)

    def _write_file(self, tree: ET.ElementTree, path: Path) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                tree.write(f, encoding="utf-8", xml_declaration=True)
            os.replace(tmp, path)
        except BaseException:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise


def create_writer() -> AtomWriter:
    """Create an AtomWriter instance.

    Returns:
        AtomWriter instance
    """
    return AtomWriter()
