"""Favicon lookup for feeds."""

import io
from urllib.parse import urlparse

import httpx
from PIL import Image, UnidentifiedImageError

from rssfeed_reader.errors import IconDecodeError, IconDerivationError, IconFetchError


def derive_icon_url(links: list[str]) -> str:
    """Build the favicon URL for a feed from its first link.

    The favicon is assumed to live at ``/favicon.ico`` on the host the feed
    links to, e.g. ``https://news.example.com/rss`` gives
    ``https://news.example.com/favicon.ico``.

    Raises:
        IconDerivationError: If there is no link or it lacks a scheme or host.
    """
    if not links or not links[0]:
        raise IconDerivationError("Feed has no links to derive an icon from")

    try:
        parts = urlparse(links[0])
        host = parts.hostname
    except ValueError as e:
        raise IconDerivationError(f"Cannot parse link {links[0]!r}: {e}") from e

    if not parts.scheme or not host:
        raise IconDerivationError(f"Link {links[0]!r} has no scheme or host")

    if ":" in host:
        host = f"[{host}]"
    return f"{parts.scheme}://{host}/favicon.ico"


def decode_icon(data: bytes) -> Image.Image:
    """Decode raw favicon bytes (ICO, PNG, GIF, ...) into an image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise IconDecodeError(f"Icon is not a decodable image: {e}") from e
    return image


def fetch_icon(client: httpx.Client, icon_url: str) -> Image.Image:
    """Download and decode a favicon.

    Raises:
        IconFetchError: If the request fails or returns a non-2xx status.
        IconDecodeError: If the body is not an image.
    """
    try:
        response = client.get(icon_url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise IconFetchError(
            f"HTTP {e.response.status_code} fetching {icon_url}"
        ) from e
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError, ValueError) as e:
        raise IconFetchError(f"Could not fetch {icon_url}: {e}") from e

    return decode_icon(response.content)
