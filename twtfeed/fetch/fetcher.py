"""Retrieve raw twtxt documents from local files or HTTP(S) URLs."""

import asyncio
import logging
from pathlib import Path
from urllib.parse import unquote, urlsplit

import httpx

from twtfeed.config import get_settings
from twtfeed.errors import FetchError, FetchTimeout, HttpStatus, NetworkUnavailable, NotFound
from twtfeed.models import FetchResult

logger = logging.getLogger(__name__)


def is_remote(source: str | Path) -> bool:
    """Check whether a source is an HTTP(S) URL rather than a local path."""
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def local_path(source: str | Path) -> Path:
    """Resolve a local path or ``file://`` URL to a Path."""
    if isinstance(source, str) and source.lower().startswith("file://"):
        return Path(unquote(urlsplit(source).path))
    return Path(source).expanduser()


class FeedFetcher:
    """Fetches feed bytes without caching or retries.

    Fetching is a coroutine; cancelling the awaiting task abandons the
    request and nothing is returned, so callers never see a partial feed.
    """

    def __init__(self, timeout: float | None = None, user_agent: str | None = None):
        """Initialize the fetcher.

        Args:
            timeout: HTTP timeout in seconds, defaults to the configured value
            user_agent: User-Agent header, defaults to the configured value
        """
        settings = get_settings()
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self._headers = {"User-Agent": user_agent or settings.user_agent}

    async def fetch(self, source: str | Path) -> bytes:
        """Fetch the full contents of a feed.

        Args:
            source: HTTP(S) URL, ``file://`` URL or filesystem path

        Returns:
            The raw bytes of the document

        Raises:
            NotFound: If a local file is missing or unreadable
            HttpStatus: If the server answers with an error status
            FetchTimeout: If the request times out
            NetworkUnavailable: If the host cannot be reached or the request fails
        """
        if is_remote(source):
            result = await self.fetch_url(str(source))
            return result.content
        return await self.read_local(source)

    async def read_local(self, source: str | Path) -> bytes:
        """Read a local feed file off the event loop."""
        path = local_path(source)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise NotFound(str(source), f"Cannot read {path}: {e}") from e

    async def fetch_url(
        self,
        url: str,
        etag: str | None = None,
        last_modified: str | None = None,
    ) -> FetchResult:
        """GET a feed URL, conditionally when validators are given.

        Args:
            url: Feed URL
            etag: ETag of a previously fetched copy
            last_modified: Last-Modified of a previously fetched copy

        Returns:
            FetchResult; ``not_modified`` is set on a 304 answer
        """
        headers = dict(self._headers)
        if etag:
            headers["If-None-Match"] = etag
        if last_modified:
            headers["If-Modified-Since"] = last_modified

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchTimeout(url, f"Timed out fetching {url}") from e
        except httpx.TransportError as e:
            raise NetworkUnavailable(url, f"Cannot reach {url}: {e}") from e
        except httpx.InvalidURL as e:
            raise FetchError(url, f"Invalid feed URL {url}: {e}") from e
        except httpx.RequestError as e:
            # Redirect loops, undecodable bodies and other protocol failures
            raise NetworkUnavailable(url, f"Request to {url} failed: {e}") from e

        if response.status_code == 304:
            logger.info(f"Feed not modified: {url}")
            return FetchResult(not_modified=True, etag=etag, last_modified=last_modified)

        if response.status_code >= 400:
            logger.warning(f"Feed fetch failed with HTTP {response.status_code}: {url}")
            raise HttpStatus(url, response.status_code)

        logger.info(f"Fetched feed {url} ({len(response.content)} bytes)")
        return FetchResult(
            content=response.content,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )
