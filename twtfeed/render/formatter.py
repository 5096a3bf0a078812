"""Turn raw message bodies into render-safe spans."""

import re
from typing import Iterable, Mapping
from urllib.parse import urlsplit

from twtfeed.models import FormattedMessage, Link, Span

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".svg")

# Order matters: a bracketed mention wins over the URL inside it.
MESSAGE_TOKEN = re.compile(
    r"@<(?P<first>[^\s>]+)(?:\s+(?P<second>[^>]+))?>"
    r"|(?P<link>https?://\S+)"
    r"|(?<!\S)@(?P<nick>[\w-]+(?:\.[\w-]+)*)"
)


def is_link(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def is_image_url(url: str) -> bool:
    """Check whether a URL's path ends in a known image extension.

    URLs that do not parse, or have no host, are never images.
    """
    try:
        parts = urlsplit(url)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    return parts.path.lower().endswith(IMAGE_EXTENSIONS)


def feed_directory(links: Iterable[Link]) -> dict[str, str]:
    """Map nicks to feed URLs, e.g. from a feed's follow list."""
    return {link.text: link.url for link in links if link.text}


def _mention(
    match: re.Match, known_feeds: Mapping[str, str]
) -> Span:
    nick = match.group("nick")
    if nick is not None:
        return Span(kind="mention", value=nick, url=known_feeds.get(nick))

    first = match.group("first")
    second = match.group("second")
    if second is not None:
        return Span(kind="mention", value=first, url=second.strip())

    if is_link(first):
        # @<url>: show the nick we know for that feed, if any
        for known_nick, url in known_feeds.items():
            if url == first:
                return Span(kind="mention", value=known_nick, url=first)
        return Span(kind="mention", value=first, url=first)

    return Span(kind="mention", value=first, url=known_feeds.get(first))


def format_message(
    raw_message: str,
    author: str | None = None,
    *,
    known_feeds: Mapping[str, str] | None = None,
) -> FormattedMessage:
    """Split a message into text, link and mention spans.

    Links run from ``http(s)://`` to the next whitespace, so punctuation
    directly after a URL stays part of it. Links to images are also listed in
    ``images``, in order, so a renderer can show them after the text. The
    function is pure: equal input gives equal output.

    Args:
        raw_message: The entry's message body
        author: Resolved author of the entry, carried through for renderers
        known_feeds: Nick to feed URL mapping used to resolve mentions

    Returns:
        FormattedMessage with spans and detected images
    """
    known_feeds = known_feeds or {}
    spans: list[Span] = []
    images: list[str] = []
    position = 0

    for match in MESSAGE_TOKEN.finditer(raw_message):
        if match.start() > position:
            spans.append(Span(kind="text", value=raw_message[position:match.start()]))
        position = match.end()

        url = match.group("link")
        if url is not None:
            spans.append(Span(kind="link", value=url, url=url))
            if is_image_url(url):
                images.append(url)
        else:
            spans.append(_mention(match, known_feeds))

    remainder = raw_message[position:]
    if remainder or not spans:
        spans.append(Span(kind="text", value=remainder))

    return FormattedMessage(spans=spans, images=images, author=author)
