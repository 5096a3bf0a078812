"""Feed fetching with a Redis-backed cache and conditional requests."""

import base64
import hashlib
import json
import logging
import random

from redis.asyncio import Redis

from twtfeed.config import get_settings

from .fetcher import FeedFetcher

logger = logging.getLogger(__name__)


def _key(url: str) -> str:
    """Generate Redis key for a feed's cached body and validators."""
    return f"twt:feed:{hashlib.sha256(url.encode('utf-8')).hexdigest()}"


def _fresh_key(url: str) -> str:
    """Generate Redis key marking a cached feed as fresh."""
    return f"{_key(url)}:fresh"


async def fetch_and_cache_feed(
    redis: Redis, url: str, fetcher: FeedFetcher | None = None
) -> bytes:
    """
    Fetch a remote twtxt feed through the Redis cache.

    While the freshness key lives (TTL + randomized splay) the cached body is
    returned without any HTTP request. Once it expires, a conditional GET is
    sent with the stored ETag / Last-Modified; a 304 reuses the cached body.
    Bodies and validators are kept for the longer stale TTL.

    Args:
        redis: Async Redis client
        url: Feed URL
        fetcher: Fetcher to use, a default FeedFetcher when omitted

    Returns:
        The raw feed bytes

    Raises:
        FetchError: If the feed cannot be fetched; nothing is cached then
    """
    settings = get_settings()
    ttl = settings.feed_ttl_seconds + random.randint(0, settings.feed_ttl_splay_max)

    key = _key(url)
    cached: dict | None = None

    # Check cache first
    if cached_data := await redis.get(key):
        cached = json.loads(cached_data)
        if await redis.exists(_fresh_key(url)):
            return base64.b64decode(cached["content"])

    fetcher = fetcher or FeedFetcher()
    result = await fetcher.fetch_url(
        url,
        etag=cached.get("etag") if cached else None,
        last_modified=cached.get("last_modified") if cached else None,
    )

    if result.not_modified:
        if cached is not None:
            await redis.setex(_fresh_key(url), ttl, b"1")
            return base64.b64decode(cached["content"])
        # 304 without a cached copy; ask again unconditionally
        result = await fetcher.fetch_url(url)

    payload = {
        "content": base64.b64encode(result.content).decode("ascii"),
        "etag": result.etag,
        "last_modified": result.last_modified,
    }
    await redis.setex(key, settings.feed_stale_ttl_seconds, json.dumps(payload))
    await redis.setex(_fresh_key(url), ttl, b"1")
    logger.debug(f"Cached feed {url} for {ttl}s")

    return result.content
