"""The Feed entity and its download state machine."""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rssfeed_reader.errors import FeedError
from rssfeed_reader.feed_parser import fetch_feed
from rssfeed_reader.models import (
    EPOCH,
    NEW_FEED_TITLE,
    FeedContent,
    FeedItem,
    FeedState,
    StoredFeed,
    format_viewed,
    parse_viewed,
)

if TYPE_CHECKING:
    from PIL.Image import Image

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], FeedContent]
Observer = Callable[["Feed", str], None]

_ids = itertools.count()


def _as_utc(value: datetime) -> datetime:
    """Aware UTC copy of ``value``. Naive values are taken as local time."""
    return value.astimezone(timezone.utc)


class Feed:
    """A subscribed feed with its download state, items and icon.

    Assigning a non-empty ``url`` starts a download right away, so it has to
    happen on the thread running the owning asyncio event loop, just like
    ``download()``. Observers registered with ``connect()`` are told about
    every property change, including every state transition.
    """

    def __init__(
        self,
        title: str = NEW_FEED_TITLE,
        url: str = "",
        filter: str = "",
        viewed: datetime = EPOCH,
        fetcher: Fetcher = fetch_feed,
        executor: Executor | None = None,
    ):
        self._id = str(next(_ids))
        self._title = title
        self._url = url
        self._filter = filter
        self._viewed = _as_utc(viewed)
        self._state = FeedState.EMPTY_URL if not url else FeedState.DOWNLOAD_PENDING
        self._items: list[FeedItem] = []
        self._icon: Image | None = None
        self.last_error: str | None = None

        self._fetcher = fetcher
        self._executor = executor
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._observers: dict[int, Observer] = {}
        self._observer_ids = itertools.count(1)

    @classmethod
    def from_stored(cls, stored: StoredFeed, **kwargs) -> Feed:
        return cls(
            title=stored.title,
            url=stored.url,
            filter=stored.filter,
            viewed=parse_viewed(stored.viewed),
            **kwargs,
        )

    def to_stored(self) -> StoredFeed:
        return StoredFeed(
            title=self._title,
            url=self._url,
            viewed=format_viewed(self._viewed),
            filter=self._filter,
        )

    # Properties

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = value
        self._notify("title")

    @property
    def url(self) -> str:
        return self._url

    @url.setter
    def url(self, value: str) -> None:
        self._url = value
        self._items = []
        self._icon = None
        self._notify("url")
        self._abandon()

        if not value:
            self._set_state(FeedState.EMPTY_URL)
        else:
            self._set_state(FeedState.DOWNLOAD_PENDING)
            self.download()

    @property
    def filter(self) -> str:
        return self._filter

    @filter.setter
    def filter(self, value: str) -> None:
        self._filter = value
        self._notify("filter")

    @property
    def viewed(self) -> datetime:
        return self._viewed

    @viewed.setter
    def viewed(self, value: datetime) -> None:
        self._viewed = _as_utc(value)
        self._notify("viewed")

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def items(self) -> list[FeedItem]:
        return list(self._items)

    @property
    def icon(self) -> Image | None:
        return self._icon

    # Observers

    def connect(self, callback: Observer) -> int:
        """Register ``callback(feed, property_name)``. Returns a handler id."""
        handler_id = next(self._observer_ids)
        self._observers[handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        self._observers.pop(handler_id, None)

    def _notify(self, name: str) -> None:
        for callback in list(self._observers.values()):
            try:
                callback(self, name)
            except Exception:
                logger.exception("Observer of feed %s failed on %r", self._id, name)

    def _set_state(self, state: FeedState) -> None:
        self._state = state
        self._notify("state")

    # Unread tracking

    def get_unread(self) -> int:
        """Number of items published after the feed was last viewed."""
        return sum(1 for item in self._items if item.published > self._viewed)

    def set_viewed(self, when: datetime | None = None) -> None:
        """Mark all current items as seen, as of ``when`` (default: now)."""
        self.viewed = when or datetime.now(timezone.utc)

    # Downloading

    def download(self) -> asyncio.Task | None:
        """Download the feed from its URL on a worker thread.

        A download that is still running is abandoned: its result will be
        ignored when it arrives, though the request itself is not aborted.

        Returns:
            The task applying the result, or None if the URL is empty.
        """
        if self._state is FeedState.EMPTY_URL:
            self._abandon()
            return None

        loop = asyncio.get_running_loop()
        self._abandon()
        self._set_state(FeedState.DOWNLOAD_STARTED)

        self._task = loop.create_task(self._download(self._generation, self._url))
        return self._task

    async def wait_for_download(self) -> None:
        """Wait until the most recently started download has been handled."""
        if self._task is not None:
            await self._task

    def _abandon(self) -> None:
        self._generation += 1
        self._task = None

    async def _download(self, generation: int, url: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            content = await loop.run_in_executor(self._executor, self._fetcher, url)
        except FeedError as e:
            self._fail(generation, url, str(e))
            return
        except Exception as e:
            if generation == self._generation:
                logger.exception("Feed %s unexpected error", url)
            self._fail(generation, url, str(e))
            return

        if generation != self._generation:
            logger.debug("Discarding stale download of %s", url)
            return

        self._task = None
        self._items = list(content.items)
        self._icon = content.icon
        self.last_error = None

        if content.title and self._title == NEW_FEED_TITLE:
            self.title = content.title

        logger.info("Feed '%s': %d items", self._title, len(self._items))
        self._set_state(FeedState.DOWNLOAD_SUCCEEDED)

    def _fail(self, generation: int, url: str, message: str) -> None:
        if generation != self._generation:
            logger.debug("Discarding stale failure of %s: %s", url, message)
            return

        self._task = None
        logger.warning("Feed %s error: %s", url, message)
        self.last_error = message
        self._set_state(FeedState.DOWNLOAD_FAILED)

    def __repr__(self) -> str:
        return f"<Feed {self._id} {self._title!r} {self._state.name}>"
