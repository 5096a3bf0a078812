"""Pydantic models for parsed twtxt feeds."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class FeedKind(str, Enum):
    """Who maintains a feed, from the ``type`` metadata field."""

    USER = "user"
    BOT = "bot"
    RSS = "rss"


class Link(_Frozen):
    """A labelled URL, used for follows and profile links."""

    text: str = ""
    url: str = Field(min_length=1)

    @property
    def label(self) -> str:
        """Display text, falling back to the URL."""
        return self.text or self.url


class FeedMetadata(_Frozen):
    """Feed-level metadata declared in ``# key = value`` comment lines."""

    nick: str | None = None
    description: str | None = None
    avatar: str | None = None
    url: str | None = None
    urls: tuple[str, ...] = ()
    kind: FeedKind = FeedKind.USER
    refresh: int | None = None
    prev: str | None = None
    following: int | None = None
    follows: tuple[Link, ...] = ()
    links: tuple[Link, ...] = ()


class Token(_Frozen):
    """One logical record of a feed document."""

    kind: Literal["metadata", "post"]
    content: str
    line_no: int
    encoding_error: bool = False


class TimelineEntry(_Frozen):
    """A single post within a feed."""

    author: str
    timestamp: str
    raw_message: str
    hash: str | None = None
    reply_subject: str | None = None
    feed_url: str | None = None
    line_no: int = 0
    placeholder: bool = False


class SkippedLine(_Frozen):
    """A post record that could not be parsed."""

    line_no: int
    content: str
    reason: str


class EntriesResult(_Frozen):
    """Entries of one parse pass plus the lines that were skipped."""

    entries: tuple[TimelineEntry, ...]
    skipped: tuple[SkippedLine, ...] = ()
    empty: bool = False


class ParsedFeed(_Frozen):
    """Everything one parse pass produced for a feed document."""

    metadata: FeedMetadata
    entries: tuple[TimelineEntry, ...]
    skipped: tuple[SkippedLine, ...] = ()
    empty: bool = False
    feed_url: str | None = None


class Span(_Frozen):
    """A piece of a formatted message."""

    kind: Literal["text", "link", "mention"]
    value: str
    url: str | None = None


class FormattedMessage(_Frozen):
    """Render-ready form of a message body."""

    spans: tuple[Span, ...]
    images: tuple[str, ...] = ()
    author: str | None = None


class FetchResult(_Frozen):
    """Outcome of a conditional HTTP fetch."""

    content: bytes = b""
    not_modified: bool = False
    etag: str | None = None
    last_modified: str | None = None
