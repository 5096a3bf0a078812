"""Tests for the feed fetcher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from twtfeed.errors import FetchTimeout, HttpStatus, NetworkUnavailable, NotFound
from twtfeed.fetch import FeedFetcher, is_remote

FEED_URL = "https://alice.example/twtxt.txt"
FEED_BYTES = b"# nick = alice\n2024-01-15T10:30:00Z\tHello\n"


@pytest.fixture
def fetcher():
    """Create a FeedFetcher with explicit settings."""
    return FeedFetcher(timeout=5, user_agent="twtfeed-test/1.0")


def create_mock_response(status_code: int, content: bytes = b"", headers: dict | None = None):
    """Helper to create a mock httpx Response."""
    mock_resp = MagicMock()
    mock_resp.status_code = status_code
    mock_resp.content = content
    mock_resp.headers = headers or {}
    return mock_resp


def mock_async_client(get):
    """Helper to patch httpx.AsyncClient with a client whose get is ``get``."""
    mock_client = AsyncMock()
    mock_client.get = get
    mock_client.__aenter__.return_value = mock_client
    mock_client.__aexit__.return_value = None
    return patch("httpx.AsyncClient", return_value=mock_client), mock_client


def test_is_remote():
    assert is_remote("https://example.com/twtxt.txt")
    assert is_remote("HTTP://example.com/twtxt.txt")
    assert not is_remote("/home/alice/twtxt.txt")
    assert not is_remote("file:///home/alice/twtxt.txt")


@pytest.mark.asyncio
async def test_fetch_remote_returns_bytes(fetcher):
    """A 200 answer returns the body bytes."""
    patcher, mock_client = mock_async_client(
        AsyncMock(return_value=create_mock_response(200, FEED_BYTES))
    )

    with patcher as mock_client_class:
        result = await fetcher.fetch(FEED_URL)

    assert result == FEED_BYTES
    mock_client_class.assert_called_once_with(timeout=5, follow_redirects=True)
    call_args = mock_client.get.call_args
    assert call_args[0][0] == FEED_URL
    assert call_args[1]["headers"]["User-Agent"] == "twtfeed-test/1.0"
    assert "If-None-Match" not in call_args[1]["headers"]


@pytest.mark.asyncio
async def test_fetch_http_error_status(fetcher):
    """Error statuses become HttpStatus carrying the code."""
    patcher, _ = mock_async_client(AsyncMock(return_value=create_mock_response(404)))

    with patcher:
        with pytest.raises(HttpStatus) as exc_info:
            await fetcher.fetch(FEED_URL)

    assert exc_info.value.code == 404
    assert exc_info.value.source == FEED_URL


@pytest.mark.asyncio
async def test_fetch_timeout(fetcher):
    patcher, _ = mock_async_client(AsyncMock(side_effect=httpx.ReadTimeout("timed out")))

    with patcher:
        with pytest.raises(FetchTimeout):
            await fetcher.fetch(FEED_URL)


@pytest.mark.asyncio
async def test_fetch_connection_error(fetcher):
    patcher, _ = mock_async_client(AsyncMock(side_effect=httpx.ConnectError("refused")))

    with patcher:
        with pytest.raises(NetworkUnavailable):
            await fetcher.fetch(FEED_URL)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [httpx.TooManyRedirects("redirect loop"), httpx.DecodingError("bad gzip body")],
)
async def test_fetch_other_request_errors(fetcher, error):
    """Any failed request surfaces as a FetchError, never a raw httpx error."""
    patcher, _ = mock_async_client(AsyncMock(side_effect=error))

    with patcher:
        with pytest.raises(NetworkUnavailable) as exc_info:
            await fetcher.fetch(FEED_URL)

    assert exc_info.value.source == FEED_URL
    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_fetch_url_conditional_not_modified(fetcher):
    """Validators are sent and a 304 is reported as not modified."""
    patcher, mock_client = mock_async_client(AsyncMock(return_value=create_mock_response(304)))

    with patcher:
        result = await fetcher.fetch_url(FEED_URL, etag='"abc"', last_modified="Mon, 15 Jan 2024 10:30:00 GMT")

    assert result.not_modified is True
    assert result.content == b""
    headers = mock_client.get.call_args[1]["headers"]
    assert headers["If-None-Match"] == '"abc"'
    assert headers["If-Modified-Since"] == "Mon, 15 Jan 2024 10:30:00 GMT"


@pytest.mark.asyncio
async def test_fetch_url_returns_validators(fetcher):
    patcher, _ = mock_async_client(
        AsyncMock(
            return_value=create_mock_response(
                200, FEED_BYTES, {"ETag": '"v2"', "Last-Modified": "Tue, 16 Jan 2024 10:30:00 GMT"}
            )
        )
    )

    with patcher:
        result = await fetcher.fetch_url(FEED_URL)

    assert result.content == FEED_BYTES
    assert result.etag == '"v2"'
    assert result.last_modified == "Tue, 16 Jan 2024 10:30:00 GMT"


@pytest.mark.asyncio
async def test_fetch_can_be_cancelled(fetcher):
    """Cancelling the awaiting task abandons the request."""

    async def slow_get(*args, **kwargs):
        await asyncio.sleep(10)
        return create_mock_response(200, FEED_BYTES)

    patcher, _ = mock_async_client(slow_get)

    with patcher:
        task = asyncio.create_task(fetcher.fetch(FEED_URL))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_fetch_local_file(fetcher, tmp_path):
    path = tmp_path / "twtxt.txt"
    path.write_bytes(FEED_BYTES)

    assert await fetcher.fetch(path) == FEED_BYTES
    assert await fetcher.fetch(str(path)) == FEED_BYTES
    assert await fetcher.fetch(path.as_uri()) == FEED_BYTES


@pytest.mark.asyncio
async def test_fetch_missing_local_file(fetcher, tmp_path):
    with pytest.raises(NotFound):
        await fetcher.fetch(tmp_path / "missing.txt")


def test_defaults_from_settings():
    """Timeout and User-Agent come from settings when not given."""
    settings = MagicMock()
    settings.fetch_timeout_seconds = 12.5
    settings.user_agent = "configured/2.0"

    with patch("twtfeed.fetch.fetcher.get_settings", return_value=settings):
        fetcher = FeedFetcher()

    assert fetcher.timeout == 12.5
    assert fetcher._headers["User-Agent"] == "configured/2.0"
