"""Shared fixtures: sample documents and item builders."""

import httpx
import pytest

from feed_percolator.models import FeedItem, FeedLink

RSS20_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Source A</title>
    <link>http://a.example.com/</link>
    <description>Source A feed</description>
    <language>en-us</language>
    <item>
      <guid>a-1</guid>
      <title>Hello</title>
      <link>http://x.example.com/a</link>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
      <description>First post</description>
      <category>Python</category>
    </item>
    <item>
      <guid>a-2</guid>
      <title>Second &amp; last</title>
      <link>http://x.example.com/b</link>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
      <description>Second post</description>
    </item>
  </channel>
</rss>
"""

RSS10_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel rdf:about="http://legacy.example.com/">
    <title>Legacy Source</title>
    <link>http://legacy.example.com/</link>
    <description>Legacy feed</description>
    <items>
      <rdf:Seq>
        <rdf:li rdf:resource="http://legacy.example.com/1"/>
      </rdf:Seq>
    </items>
  </channel>
  <item rdf:about="http://legacy.example.com/1">
    <title>Legacy item</title>
    <link>http://legacy.example.com/1</link>
    <description>From the legacy format</description>
    <dc:date>2024-01-01T08:00:00Z</dc:date>
  </item>
</rdf:RDF>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Source</title>
  <id>urn:example:atom</id>
  <updated>2024-01-03T00:00:00Z</updated>
  <entry>
    <id>urn:example:atom:1</id>
    <title>Atom entry</title>
    <link rel="alternate" href="http://atom.example.com/1"/>
    <link rel="enclosure" type="audio/mpeg" href="http://atom.example.com/1.mp3"/>
    <published>2024-01-03T09:00:00Z</published>
    <updated>2024-01-03T09:30:00Z</updated>
    <author><name>Jane Doe</name></author>
    <summary>Atom summary</summary>
    <content type="html">&lt;p&gt;Atom content&lt;/p&gt;</content>
  </entry>
</feed>
"""

ATOM03_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed version="0.3" xmlns="http://purl.org/atom/ns#">
  <title>Old Atom</title>
  <modified>2004-01-01T00:00:00Z</modified>
  <entry>
    <title>Old entry</title>
    <id>tag:old.example.com,2004:1</id>
    <issued>2004-01-01T00:00:00Z</issued>
    <modified>2004-01-01T00:00:00Z</modified>
  </entry>
</feed>
"""

MALFORMED_FEED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Broken</title><item><title>Unclosed
"""


@pytest.fixture
def sample_feeds() -> dict:
    """Raw sample documents keyed by format."""
    return {
        "rss20": RSS20_FEED,
        "rss10": RSS10_FEED,
        "atom": ATOM_FEED,
        "atom03": ATOM03_FEED,
        "malformed": MALFORMED_FEED,
    }


@pytest.fixture
def make_item():
    """Build a FeedItem with a single alternate link."""

    def _make_item(
        id="1",
        title="Title",
        link="http://example.com/1",
        published=None,
        **kwargs,
    ) -> FeedItem:
        links = (FeedLink(href=link),) if link else ()
        return FeedItem(id=id, title=title, links=links, published=published, **kwargs)

    return _make_item


@pytest.fixture
def feed_transport():
    """Build an httpx.MockTransport serving bodies by URL.

    A value that is an exception instance is raised for that URL; an int is
    returned as an empty response with that status code.
    """

    def _feed_transport(routes: dict) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404)
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return httpx.Response(route)
            return httpx.Response(200, content=route, headers={"Content-Type": "application/xml"})

        return httpx.MockTransport(handler)

    return _feed_transport
