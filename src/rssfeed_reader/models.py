"""Data models for the RSS feed reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL.Image import Image

NEW_FEED_TITLE = "New Feed"
UNNAMED_ITEM_TITLE = "Unnamed Item"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

VIEWED_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


class FeedState(Enum):
    """Download lifecycle of a Feed."""

    EMPTY_URL = "empty-url"
    DOWNLOAD_PENDING = "download-pending"
    DOWNLOAD_STARTED = "download-started"
    DOWNLOAD_FAILED = "download-failed"
    DOWNLOAD_SUCCEEDED = "download-succeeded"


@dataclass(frozen=True)
class FeedItem:
    """A single entry of a downloaded feed."""

    title: str
    url: str
    summary: str = ""
    content: str = ""
    published: datetime = EPOCH


@dataclass
class FeedContent:
    """Result of a successful download."""

    title: str | None
    items: list[FeedItem] = field(default_factory=list)
    icon: Image | None = None


@dataclass
class StoredFeed:
    """The per-feed record kept in the application settings."""

    title: str
    url: str
    viewed: str = ""
    filter: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> StoredFeed:
        return cls(
            title=data.get("title", NEW_FEED_TITLE),
            url=data.get("url", ""),
            viewed=data.get("viewed", ""),
            filter=data.get("filter", ""),
        )

    def to_dict(self) -> dict:
        data = {"title": self.title, "url": self.url, "viewed": self.viewed}
        if self.filter:
            data["filter"] = self.filter
        return data


def parse_viewed(value: str) -> datetime:
    """Parse a stored ``viewed`` marker. Empty or invalid values mean "never"."""
    if not value:
        return EPOCH
    try:
        return datetime.strptime(value, VIEWED_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return EPOCH


def format_viewed(value: datetime) -> str:
    """Format a ``viewed`` marker for storage."""
    return value.astimezone(timezone.utc).strftime(VIEWED_FORMAT)
