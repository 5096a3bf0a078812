"""Fetch-and-parse pipeline tying the tokenizer, extractor and parser together."""

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from redis.asyncio import Redis

from twtfeed.errors import FetchError
from twtfeed.fetch import FeedFetcher, fetch_and_cache_feed, is_remote
from twtfeed.models import Link, ParsedFeed
from twtfeed.parser import extract_metadata, parse_entries, tokenize

logger = logging.getLogger(__name__)


def parse_feed(
    raw: bytes,
    *,
    label: str | None = None,
    feed_url: str | None = None,
    prefer_label: bool = False,
) -> ParsedFeed:
    """Parse a complete feed document.

    Args:
        raw: The document bytes
        label: Display name supplied by the caller, e.g. from the follow list
        feed_url: URL the feed was fetched from
        prefer_label: Show entries under ``label`` even if the feed declares
            its own nick

    Returns:
        ParsedFeed with metadata, entries and skipped lines
    """
    tokens = tokenize(raw)
    metadata = extract_metadata(tokens)

    author = label if prefer_label or not metadata.nick else None
    # Hashes use the feed's declared url when there is one
    hash_url = metadata.url or feed_url

    result = parse_entries(tokens, metadata, author=author, feed_url=hash_url)

    logger.info(
        f"Parsed feed {feed_url or label or metadata.nick or '<local>'}: "
        f"{0 if result.empty else len(result.entries)} entries, {len(result.skipped)} skipped"
    )

    return ParsedFeed(
        metadata=metadata,
        entries=result.entries,
        skipped=result.skipped,
        empty=result.empty,
        feed_url=feed_url,
    )


async def load_feed(
    source: str | Path,
    *,
    fetcher: FeedFetcher | None = None,
    label: str | None = None,
    prefer_label: bool = False,
    feed_url: str | None = None,
    redis: Redis | None = None,
) -> ParsedFeed:
    """Fetch a feed and parse it once the whole payload has arrived.

    Remote feeds go through the Redis cache when a client is given.

    Raises:
        FetchError: If the feed cannot be retrieved
    """
    fetcher = fetcher or FeedFetcher()
    if is_remote(source):
        feed_url = feed_url or str(source)
        if redis is not None:
            raw = await fetch_and_cache_feed(redis, str(source), fetcher)
        else:
            raw = await fetcher.fetch(source)
    else:
        raw = await fetcher.fetch(source)

    return parse_feed(raw, label=label, feed_url=feed_url, prefer_label=prefer_label)


async def _load_or_error(source: Link, **kwargs) -> ParsedFeed | FetchError:
    try:
        return await load_feed(source.url, label=source.text or None, **kwargs)
    except FetchError as e:
        logger.warning(f"Failed to load feed {source.url}: {e}")
        return e


async def load_feeds(
    sources: Iterable[Link],
    *,
    fetcher: FeedFetcher | None = None,
    prefer_label: bool = False,
    redis: Redis | None = None,
) -> list[ParsedFeed | FetchError]:
    """Load several feeds concurrently.

    Each feed is fetched and parsed independently; a feed that fails to load
    contributes its FetchError in its slot and does not affect the others.

    Args:
        sources: Feeds to load, with their display labels
        fetcher: Shared fetcher
        prefer_label: Show entries under the labels instead of feed nicks
        redis: Optional cache for remote feeds

    Returns:
        One ParsedFeed or FetchError per source, in the order given
    """
    fetcher = fetcher or FeedFetcher()
    return await asyncio.gather(
        *(
            _load_or_error(source, fetcher=fetcher, prefer_label=prefer_label, redis=redis)
            for source in sources
        )
    )
