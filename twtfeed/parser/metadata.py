"""Extract feed metadata from ``# key = value`` comment lines."""

import logging
from typing import Iterable

from twtfeed.models import FeedKind, FeedMetadata, Link, Token

from .tokenizer import METADATA_LINE

logger = logging.getLogger(__name__)


def parse_link(value: str) -> Link | None:
    """Parse a ``<text> <url>`` or bare ``<url>`` value.

    The URL is the last whitespace-separated word; everything before it is
    the text. Returns None unless that word is an http(s) URL, so a bare
    nick such as ``jane`` is dropped.
    """
    text, _, url = value.strip().rpartition(" ")
    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        return None
    return Link(text=text.strip(), url=url)


def parse_kind(value: str) -> FeedKind:
    """Map a ``type`` value to a FeedKind, defaulting to a human user."""
    try:
        return FeedKind(value.strip().lower())
    except ValueError:
        return FeedKind.USER


def _parse_seconds(value: str) -> int | None:
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def extract_metadata(tokens: Iterable[Token]) -> FeedMetadata:
    """Build FeedMetadata from the metadata tokens of one feed.

    Non-metadata tokens are ignored, so the full token stream can be passed
    and metadata declared after the first post is still picked up. Unknown
    keys are ignored; repeated follow and link keys accumulate in order.

    Args:
        tokens: Tokens produced by tokenize()

    Returns:
        A new FeedMetadata snapshot; all fields unset for a feed without
        metadata
    """
    fields: dict = {}
    urls: list[str] = []
    follows: list[Link] = []
    links: list[Link] = []

    for token in tokens:
        if token.kind != "metadata":
            continue
        match = METADATA_LINE.match(token.content)
        if match is None:
            continue

        key = match.group("key").lower()
        value = match.group("value").strip()

        if key in ("nick", "description", "avatar"):
            if value:
                fields[key] = value
        elif key == "url":
            if value:
                urls.append(value)
        elif key in ("type", "kind"):
            fields["kind"] = parse_kind(value)
        elif key == "follow":
            if link := parse_link(value):
                follows.append(link)
        elif key == "following":
            # Either a count (informational) or a follow written the old way
            if value.isdigit():
                fields["following"] = int(value)
            elif link := parse_link(value):
                follows.append(link)
        elif key == "link":
            if link := parse_link(value):
                links.append(link)
        elif key == "prev":
            if value:
                fields["prev"] = value.split()[-1]
        elif key == "refresh":
            seconds = _parse_seconds(value)
            if seconds is not None:
                fields["refresh"] = seconds
        else:
            logger.debug(f"Ignoring unknown metadata key: {key}")

    return FeedMetadata(
        **fields,
        url=urls[0] if urls else None,
        urls=urls,
        follows=follows,
        links=links,
    )
