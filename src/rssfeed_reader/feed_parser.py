"""Download and parse RSS/Atom feeds using httpx and feedparser."""

import calendar
import io
import logging
from datetime import datetime, timezone
from time import struct_time
from urllib.parse import urlparse

import feedparser
import httpx
from PIL.Image import Image

from rssfeed_reader.config import load_settings
from rssfeed_reader.errors import (
    FetchError,
    IconError,
    ItemLinkMissing,
    ParseError,
)
from rssfeed_reader.icons import derive_icon_url, fetch_icon
from rssfeed_reader.models import EPOCH, UNNAMED_ITEM_TITLE, FeedContent, FeedItem

logger = logging.getLogger(__name__)


def fetch_feed(
    url: str,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> FeedContent:
    """Fetch and parse an RSS or Atom feed together with its favicon.

    This blocks on network I/O and is meant to run on a worker thread.
    Problems with the favicon never fail the download, the icon is simply
    left out.

    Args:
        url: The feed URL to fetch and parse.
        client: HTTP client to use. A short-lived one is created if omitted.
        timeout: Per request timeout in seconds, used when creating a client.

    Returns:
        FeedContent with the document title, the normalized items in
        document order and the decoded favicon (or None).

    Raises:
        FetchError: If the URL is invalid, unreachable or returns an error status.
        ParseError: If the response is not a valid RSS or Atom feed.
    """
    if client is None:
        settings = load_settings()
        with httpx.Client(
            timeout=timeout if timeout is not None else settings.request_timeout,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        ) as own_client:
            return fetch_feed(url, client=own_client)

    data = _fetch_document(client, url)
    parsed = _parse_document(data, url)

    links = _hrefs(parsed.feed.get("links")) or [parsed.feed.get("link")]
    icon = _load_icon(client, links)
    items = _extract_items(parsed.entries)

    return FeedContent(
        title=parsed.feed.get("title") or None,
        items=items,
        icon=icon,
    )


def _validate_url(url: str) -> None:
    """Validate that the URL has a valid format."""
    try:
        result = urlparse(url)
    except ValueError:
        raise FetchError(f"Invalid URL format: {url!r}")
    if not result.scheme or not result.netloc:
        raise FetchError(f"Invalid URL format: {url!r}")
    if result.scheme not in ("http", "https"):
        raise FetchError("Invalid URL format: only http and https are supported")


def _fetch_document(client: httpx.Client, url: str) -> bytes:
    _validate_url(url)
    try:
        response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"Could not reach URL: HTTP {e.response.status_code}"
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise FetchError(f"Could not reach URL: {e}") from e
    return response.content


def _parse_document(data: bytes, url: str) -> feedparser.FeedParserDict:
    parsed = feedparser.parse(io.BytesIO(data))

    if not parsed.get("version"):
        raise ParseError("URL does not point to a valid RSS or Atom feed")

    if parsed.bozo:
        logger.warning(
            "Feed %s has formatting issues: %s", url, parsed.get("bozo_exception")
        )
    return parsed


def _load_icon(client: httpx.Client, links: list[str]) -> Image | None:
    try:
        return fetch_icon(client, derive_icon_url(links))
    except IconError as e:
        logger.debug("No icon: %s", e)
        return None


def _hrefs(links) -> list[str]:
    return [link["href"] for link in links or [] if link.get("href")]


def _extract_items(entries: list) -> list[FeedItem]:
    """Build FeedItems from feedparser entries, keeping document order.

    Entries without any link are skipped.
    """
    items = []
    for entry in entries:
        try:
            items.append(_normalize_entry(entry))
        except ItemLinkMissing as e:
            logger.warning("Skipping entry: %s", e)
    return items


def _normalize_entry(entry) -> FeedItem:
    links = _hrefs(entry.get("links")) or [entry.get("link")]
    if not links[0]:
        raise ItemLinkMissing(
            f"entry {entry.get('title', 'unknown')!r} has no link"
        )

    content = entry.get("content") or []
    return FeedItem(
        title=entry.get("title") or UNNAMED_ITEM_TITLE,
        url=links[0],
        summary=entry.get("summary") or "",
        content=content[0].get("value", "") if content else "",
        published=_parse_date(entry),
    )


def _parse_date(entry) -> datetime:
    """Parse publication date from a feedparser entry, as aware UTC."""
    for field in ("published_parsed", "updated_parsed"):
        time_struct = entry.get(field)
        if isinstance(time_struct, struct_time):
            try:
                return datetime.fromtimestamp(
                    calendar.timegm(time_struct), tz=timezone.utc
                )
            except (ValueError, OverflowError, OSError):
                continue
    return EPOCH
