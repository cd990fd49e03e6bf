"""Entry point for the RSS feed reader: python -m rssfeed_reader"""

import argparse
import asyncio
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor

from rssfeed_reader.config import load_settings
from rssfeed_reader.feed import Feed
from rssfeed_reader.models import NEW_FEED_TITLE, FeedState, StoredFeed
from rssfeed_reader.poller import refresh_feeds_once, start_refreshing

DEFAULT_LIMIT = 10


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="rssfeed_reader",
        description="Download RSS/Atom feeds and list their items.",
    )
    parser.add_argument("urls", nargs="*", metavar="URL", help="feed URLs")
    parser.add_argument(
        "--feeds",
        metavar="FILE",
        help="JSON file with a list of {title, url, viewed, filter} records",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="keep refreshing the feeds at RSS_POLL_INTERVAL",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"items to print per feed (default: {DEFAULT_LIMIT})",
    )
    return parser.parse_args(argv)


def load_stored_feeds(path: str) -> list[StoredFeed]:
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    return [StoredFeed.from_dict(record) for record in records]


def print_feed(feed: Feed, limit: int) -> None:
    print(f"{feed.title} [{feed.state.name}]")
    if feed.state is FeedState.DOWNLOAD_FAILED:
        print(f"  error: {feed.last_error}")
    print(
        f"  {len(feed.items)} items, {feed.get_unread()} unread, "
        f"icon: {'yes' if feed.icon is not None else 'no'}"
    )
    for item in feed.items[:limit]:
        print(f"  - {item.title} <{item.url}>")
    print()


async def main(argv: list[str] | None = None) -> int:
    """Download the requested feeds and print them."""
    args = parse_args(argv)
    settings = load_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quiet noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    stored = [StoredFeed(title=NEW_FEED_TITLE, url=url) for url in args.urls]
    if args.feeds:
        stored.extend(load_stored_feeds(args.feeds))
    if not stored:
        print("No feeds given.", file=sys.stderr)
        return 2

    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        feeds = [Feed.from_stored(s, executor=executor) for s in stored]

        if args.watch:

            def show(_succeeded: int) -> None:
                for feed in feeds:
                    print_feed(feed, args.limit)

            try:
                await start_refreshing(feeds, settings.poll_interval, on_cycle=show)
            except asyncio.CancelledError:
                pass
            return 0

        await refresh_feeds_once(feeds)
        for feed in feeds:
            print_feed(feed, args.limit)

    failed = any(feed.state is FeedState.DOWNLOAD_FAILED for feed in feeds)
    return 1 if failed else 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    run()
