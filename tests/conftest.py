"""Shared test fixtures for RSS feed reader tests."""

import io

import httpx
import pytest
from PIL import Image


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Feed</title>
    <link>https://news.example.com/rss</link>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://news.example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the first article</description>
      <pubDate>Fri, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <link>https://news.example.com/article-2</link>
      <guid>article-2</guid>
      <description>An article without a title</description>
      <pubDate>Fri, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Third Article</title>
      <link>https://news.example.com/article-3</link>
      <guid>article-3</guid>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://atom.example.org/"/>
  <subtitle>A test Atom feed</subtitle>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://atom.example.org/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <content type="text">Full text of entry 1</content>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

SAMPLE_NO_LINK_ENTRY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Partial Feed</title>
    <link>https://partial.example.com/</link>
    <item>
      <title>Has a link</title>
      <link>https://partial.example.com/ok</link>
    </item>
    <item>
      <title>No link at all</title>
      <description>Nothing to open</description>
    </item>
  </channel>
</rss>"""

SAMPLE_MALFORMED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Malformed Feed</title>
    <link>https://example.com</link>
    <item>
      <title>Good Item</title>
      <guid>good-item</guid>
    </item>
    <item>
      <title>Bad Item</title>
      <!-- Missing closing tags intentionally -->
"""

SAMPLE_NOT_A_FEED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<html>
  <body>This is not a feed</body>
</html>"""


def make_png() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (16, 16), (255, 0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def make_client(routes: dict) -> httpx.Client:
    """Client answering from ``routes``: URL -> httpx.Response or exception.

    Unknown URLs get a 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        answer = routes.get(str(request.url))
        if answer is None:
            return httpx.Response(404)
        if isinstance(answer, Exception):
            raise answer
        return answer

    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def sample_rss_xml():
    """Sample valid RSS 2.0 XML with one title-less item."""
    return SAMPLE_RSS_XML


@pytest.fixture
def sample_atom_xml():
    """Sample valid Atom XML."""
    return SAMPLE_ATOM_XML


@pytest.fixture
def sample_no_link_entry_xml():
    """Sample RSS XML where one item has no link."""
    return SAMPLE_NO_LINK_ENTRY_XML


@pytest.fixture
def sample_malformed_xml():
    """Sample malformed RSS XML."""
    return SAMPLE_MALFORMED_XML


@pytest.fixture
def sample_not_a_feed_xml():
    """Sample XML that is not a feed."""
    return SAMPLE_NOT_A_FEED_XML


@pytest.fixture
def png_icon():
    """Bytes of a small PNG image."""
    return make_png()


@pytest.fixture
def client_factory():
    """Build mock httpx clients from a route table, closing them afterwards."""
    clients = []

    def factory(routes: dict) -> httpx.Client:
        client = make_client(routes)
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()
