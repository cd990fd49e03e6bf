"""Periodic refresh of a set of feeds."""

import asyncio
import logging
from collections.abc import Callable, Iterable

from rssfeed_reader.config import load_settings
from rssfeed_reader.feed import Feed
from rssfeed_reader.models import FeedState

logger = logging.getLogger(__name__)


async def refresh_feeds_once(feeds: Iterable[Feed]) -> int:
    """Download all feeds that have a URL. Returns count of successful ones."""
    started = []
    for feed in feeds:
        task = feed.download()
        if task is not None:
            started.append((feed, task))

    if not started:
        return 0

    await asyncio.gather(*(task for _, task in started))

    return sum(
        1 for feed, _ in started if feed.state is FeedState.DOWNLOAD_SUCCEEDED
    )


async def start_refreshing(
    feeds: Iterable[Feed],
    interval: int | None = None,
    on_cycle: Callable[[int], None] | None = None,
) -> None:
    """Refresh the feeds indefinitely, sleeping ``interval`` seconds in between."""
    if interval is None:
        interval = load_settings().poll_interval
    feeds = list(feeds)
    logger.info("Poller started (interval: %ds, %d feeds)", interval, len(feeds))

    while True:
        try:
            succeeded = await refresh_feeds_once(feeds)
            logger.info(
                "Refresh cycle complete: %d of %d feeds succeeded",
                succeeded,
                len(feeds),
            )
            if on_cycle is not None:
                on_cycle(succeeded)
        except Exception as e:
            logger.error("Refresh cycle failed: %s", e)

        await asyncio.sleep(interval)
