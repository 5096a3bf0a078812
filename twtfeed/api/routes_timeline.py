"""Aggregated timeline endpoint for the twtxt feed reader API."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from redis.asyncio import Redis
from slowapi import Limiter
from slowapi.util import get_remote_address

from twtfeed.api.dependencies import get_redis
from twtfeed.api.routes_feed import serialize_entry
from twtfeed.config import get_settings
from twtfeed.errors import FetchError
from twtfeed.pipeline import load_feed, load_feeds
from twtfeed.render import feed_directory
from twtfeed.timeline import aggregate_timelines, build_reply_index, decode_cursor, reply_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/timeline", tags=["timeline"])
limiter = Limiter(key_func=get_remote_address)


@router.get("")
@limiter.limit("30/minute")
async def get_timeline(
    request: Request,
    limit: int | None = Query(default=None, ge=1, description="Entries per page"),
    cursor: str | None = Query(default=None, description="Pagination cursor"),
    redis: Redis = Depends(get_redis),
):
    """
    The local feed merged with every followed feed, newest first.

    Followed feeds are shown under the labels given in the follow list.
    Feeds that fail to load are reported in ``errors`` and do not affect
    the rest of the timeline.

    Returns:
        JSON response with:
            - items: Entries with formatted message, HTML and reply target
            - next_cursor: Cursor for next page (null if no more items)
            - errors: Feeds that could not be loaded
    """
    settings = get_settings()
    limit = min(limit or settings.page_size_default, settings.page_size_max)

    if cursor:
        try:
            decode_cursor(cursor)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid cursor format")

    results = await load_feeds(settings.follows, prefer_label=True, redis=redis)

    if settings.twtxt_path:
        try:
            local = await load_feed(
                settings.twtxt_path,
                label=settings.nick or None,
                feed_url=settings.feed_url or None,
            )
            results.append(local)
        except FetchError as e:
            logger.warning(f"Failed to read local feed {settings.twtxt_path}: {e}")
            results.append(e)

    feeds = []
    errors = []
    for result in results:
        if isinstance(result, FetchError):
            errors.append({"source": result.source, "error": str(result)})
        else:
            feeds.append(result.entries)

    page = aggregate_timelines(feeds, limit=limit, cursor=cursor)
    index = build_reply_index(e for f in feeds for e in f)
    known_feeds = feed_directory(settings.follows)

    items = []
    for entry in page["items"]:
        data = serialize_entry(entry, known_feeds)
        target = reply_target(entry, index)
        data["reply_to"] = (
            {"author": target.author, "hash": target.hash, "raw_message": target.raw_message}
            if target
            else None
        )
        items.append(data)

    return {"items": items, "next_cursor": page["next_cursor"], "errors": errors}
