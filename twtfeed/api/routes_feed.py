"""Single-feed endpoint for the twtxt feed reader API."""

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from redis.asyncio import Redis
from slowapi import Limiter
from slowapi.util import get_remote_address

from twtfeed.api.dependencies import get_redis
from twtfeed.errors import FetchError, FetchTimeout, HttpStatus, NotFound
from twtfeed.fetch import is_remote
from twtfeed.models import TimelineEntry
from twtfeed.pipeline import load_feed
from twtfeed.render import feed_directory, format_message, render_html

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/feed", tags=["feed"])
limiter = Limiter(key_func=get_remote_address)


def fetch_error_to_http(error: FetchError) -> HTTPException:
    """Map a fetch failure to the HTTP error reported to the client."""
    if isinstance(error, NotFound):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, FetchTimeout):
        return HTTPException(status_code=504, detail=str(error))
    if isinstance(error, HttpStatus):
        return HTTPException(status_code=502, detail=f"Feed server returned HTTP {error.code}")
    return HTTPException(status_code=502, detail=str(error))


def serialize_entry(
    entry: TimelineEntry, known_feeds: Mapping[str, str] | None = None
) -> dict[str, Any]:
    """Serialize an entry with its formatted message and HTML rendering."""
    formatted = format_message(entry.raw_message, entry.author, known_feeds=known_feeds)
    data = entry.model_dump(mode="json")
    data["formatted"] = formatted.model_dump(mode="json")
    data["html"] = render_html(formatted)
    return data


@router.get("")
@limiter.limit("60/minute")
async def get_feed(
    request: Request,
    url: str = Query(description="HTTP(S) URL of a twtxt feed"),
    label: str | None = Query(default=None, description="Display name override"),
    redis: Redis = Depends(get_redis),
):
    """
    View a single remote feed.

    Returns:
        JSON response with:
            - metadata: The feed's declared metadata
            - entries: Entries in feed order, each with formatted spans and HTML
            - skipped: Number of lines that could not be parsed
            - empty: True when the feed has no valid entries
    """
    # Only remote feeds; never read server-side files on a client's behalf
    if not is_remote(url):
        raise HTTPException(status_code=400, detail="Feed URL must use http or https")

    try:
        feed = await load_feed(url, label=label, prefer_label=bool(label), redis=redis)
    except FetchError as e:
        logger.warning(f"Failed to load feed {url}: {e}")
        raise fetch_error_to_http(e) from e

    known_feeds = feed_directory(feed.metadata.follows)

    return {
        "metadata": feed.metadata.model_dump(mode="json"),
        "entries": [serialize_entry(entry, known_feeds) for entry in feed.entries],
        "skipped": len(feed.skipped),
        "empty": feed.empty,
    }
