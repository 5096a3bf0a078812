"""Parse post tokens into timeline entries."""

import logging
import re
from typing import Iterable
from urllib.parse import urlsplit

from twtfeed.hashing import compute_twt_hash
from twtfeed.models import EntriesResult, FeedMetadata, SkippedLine, TimelineEntry, Token
from twtfeed.timestamps import looks_like_timestamp

from .tokenizer import LEGACY_POST, TAB_POST

logger = logging.getLogger(__name__)

# twtxt encodes line breaks inside a message as U+2028
LINE_SEPARATOR = "\u2028"

# A reply marker such as "(#abc1234)", optionally after leading @<...> mentions
SUBJECT = re.compile(r"^(?P<mentions>(?:\s*@<[^>]*>)*)\s*\(#(?P<subject>[^)\s]+)\)[ \t]*")

PLACEHOLDER_AUTHOR = "error!"
PLACEHOLDER_MESSAGE = "no valid entries found"


def split_reply_subject(message: str) -> tuple[str | None, str]:
    """Lift a leading ``(#subject)`` marker out of a message.

    Returns:
        A tuple of (subject or None, message without the marker)
    """
    match = SUBJECT.match(message)
    if match is None:
        return None, message

    mentions = match.group("mentions").strip()
    rest = message[match.end():]
    if mentions and rest:
        text = f"{mentions} {rest}"
    else:
        text = mentions or rest
    return match.group("subject"), text


def resolve_author(
    metadata: FeedMetadata | None = None,
    label: str | None = None,
    feed_url: str | None = None,
) -> str:
    """Pick the name entries of a feed are shown under.

    A caller-supplied label wins, then the feed's own nick, then the host of
    the feed URL.
    """
    if label:
        return label
    if metadata is not None and metadata.nick:
        return metadata.nick
    if feed_url:
        try:
            host = urlsplit(feed_url).hostname
        except ValueError:
            host = None
        if host:
            return host
    return "unknown"


def placeholder_entry() -> TimelineEntry:
    """Entry shown in place of a feed that has no valid posts."""
    return TimelineEntry(
        author=PLACEHOLDER_AUTHOR,
        timestamp="",
        raw_message=PLACEHOLDER_MESSAGE,
        placeholder=True,
    )


def _skip(token: Token, reason: str) -> SkippedLine:
    return SkippedLine(line_no=token.line_no, content=token.content, reason=reason)


def parse_post(
    token: Token,
    *,
    author: str = "unknown",
    feed_url: str | None = None,
) -> TimelineEntry | SkippedLine:
    """Parse one post token.

    Accepts ``<timestamp>\\t<message>`` and the older aggregated shape
    ``<user> (<timestamp>): <message>``, where the author comes from the
    line itself.

    Args:
        token: A post token
        author: Author for tab-separated posts
        feed_url: URL of the feed; when given, the entry hash is computed

    Returns:
        The entry, or a SkippedLine explaining why the token was rejected
    """
    if token.encoding_error:
        return _skip(token, "invalid UTF-8")
    if token.kind != "post":
        return _skip(token, "not a post")

    content = token.content
    if content.startswith("#"):
        return _skip(token, "comment without key = value")

    if match := TAB_POST.match(content):
        timestamp = match.group("timestamp")
        source_text = match.group("message")
        if not looks_like_timestamp(timestamp):
            return _skip(token, "malformed timestamp")
        entry_author = author
        message = source_text.rstrip().replace(LINE_SEPARATOR, "\n")
    elif match := LEGACY_POST.match(content):
        timestamp = match.group("timestamp").strip()
        if not looks_like_timestamp(timestamp):
            return _skip(token, "malformed timestamp")
        source_text = match.group("message")
        entry_author = match.group("author").strip() or author
        message = source_text.strip()
    else:
        return _skip(token, "unrecognized line")

    if not message.strip():
        return _skip(token, "empty message")

    reply_subject, message = split_reply_subject(message)

    return TimelineEntry(
        author=entry_author,
        timestamp=timestamp,
        raw_message=message,
        hash=compute_twt_hash(feed_url, timestamp, source_text) if feed_url else None,
        reply_subject=reply_subject,
        feed_url=feed_url,
        line_no=token.line_no,
    )


def parse_entries(
    tokens: Iterable[Token],
    metadata: FeedMetadata | None = None,
    *,
    author: str | None = None,
    feed_url: str | None = None,
) -> EntriesResult:
    """Parse every post token of a feed into entries, in source order.

    Malformed lines are skipped and reported, never fatal. When nothing
    parses, the result holds a single placeholder entry and ``empty`` is set.

    Args:
        tokens: Tokens produced by tokenize(); metadata tokens are ignored
        metadata: The feed's metadata, used to resolve the author
        author: Caller-supplied author label, overriding the feed's nick
        feed_url: URL of the feed, used for the author fallback and hashes

    Returns:
        EntriesResult with entries and skipped lines
    """
    label = resolve_author(metadata, author, feed_url)
    entries: list[TimelineEntry] = []
    skipped: list[SkippedLine] = []

    for token in tokens:
        if token.kind != "post":
            continue
        outcome = parse_post(token, author=label, feed_url=feed_url)
        if isinstance(outcome, SkippedLine):
            logger.debug(f"Skipping line {outcome.line_no}: {outcome.reason}")
            skipped.append(outcome)
        else:
            entries.append(outcome)

    if not entries:
        return EntriesResult(entries=(placeholder_entry(),), skipped=skipped, empty=True)

    return EntriesResult(entries=entries, skipped=skipped)
