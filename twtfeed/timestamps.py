"""Helpers for the loosely formatted timestamps found in twtxt feeds."""

import re
from datetime import datetime, timezone

# Enough structure to tell a timestamp apart from free text; the rest is
# left to parse_timestamp.
TIMESTAMP_LIKE = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def looks_like_timestamp(value: str) -> bool:
    """Check whether a string has the shape of an ISO 8601 date-time."""
    return bool(TIMESTAMP_LIKE.match(value))


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO 8601 / RFC 3339 timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC. Returns None when the value
    cannot be parsed.
    """
    if not value:
        return None
    try:
        # Convert Z to +00:00 for proper parsing
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
