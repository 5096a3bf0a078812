"""Timeline aggregator for merging and paginating entries of several feeds."""

import base64
import json
import math
from typing import Iterable, Sequence

from twtfeed.models import TimelineEntry
from twtfeed.timestamps import parse_timestamp


def _sort_key(entry: TimelineEntry) -> tuple[float, str]:
    """Order by timestamp, then by hash (or author and line) for determinism."""
    parsed = parse_timestamp(entry.timestamp)
    seconds = parsed.timestamp() if parsed else -math.inf
    return seconds, entry.hash or f"{entry.author}:{entry.line_no}"


def make_cursor(entry: TimelineEntry) -> str:
    """Create a base64-encoded cursor from a timeline entry.

    Args:
        entry: The last entry of a page

    Returns:
        A base64-encoded cursor string
    """
    seconds, key = _sort_key(entry)
    blob = json.dumps({"t": None if math.isinf(seconds) else seconds, "k": key})
    return base64.urlsafe_b64encode(blob.encode()).decode()


def decode_cursor(cursor: str) -> tuple[float, str]:
    """Decode a cursor string back to its sort key.

    Raises:
        ValueError: If the cursor is malformed
    """
    try:
        d = json.loads(base64.urlsafe_b64decode(cursor))
        seconds = -math.inf if d["t"] is None else float(d["t"])
        return seconds, str(d["k"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError("Invalid cursor") from e


def aggregate_timelines(
    feeds: Sequence[Sequence[TimelineEntry]],
    limit: int = 24,
    cursor: str | None = None,
) -> dict:
    """Merge entries of several feeds into one newest-first page.

    Placeholder entries of empty feeds are dropped. Entries whose timestamp
    cannot be parsed sort after all others.

    Args:
        feeds: Entries of each feed
        limit: Maximum number of entries per page (default: 24)
        cursor: Pagination cursor from a previous page (default: None)

    Returns:
        A dict with:
            - "items": List of TimelineEntry objects for the current page
            - "next_cursor": Cursor string for the next page, or None
    """
    items = [e for f in feeds for e in f if not e.placeholder]

    items.sort(key=_sort_key, reverse=True)

    if cursor:
        position = decode_cursor(cursor)
        items = [e for e in items if _sort_key(e) < position]

    page = items[:limit]

    next_cursor = make_cursor(page[-1]) if len(items) > limit else None

    return {"items": page, "next_cursor": next_cursor}


def build_reply_index(entries: Iterable[TimelineEntry]) -> dict[str, TimelineEntry]:
    """Index entries by hash so replies can find what they answer."""
    return {entry.hash: entry for entry in entries if entry.hash}


def reply_target(
    entry: TimelineEntry, index: dict[str, TimelineEntry]
) -> TimelineEntry | None:
    """Return the entry a reply refers to, if it is known."""
    if entry.reply_subject is None:
        return None
    return index.get(entry.reply_subject)
