"""Content hashes for twtxt entries (twt hash extension)."""

import base64
import hashlib

from twtfeed.timestamps import parse_timestamp

HASH_LENGTH = 7


def normalize_timestamp(timestamp: str) -> str:
    """Render a timestamp as RFC 3339 UTC with a Z suffix, truncated to seconds.

    Timestamps that cannot be parsed are returned unchanged.
    """
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return timestamp
    return parsed.replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")


def compute_twt_hash(feed_url: str, timestamp: str, text: str) -> str:
    """Compute the short hash identifying an entry.

    The hash is the last seven characters of the lowercase, unpadded base32
    encoding of a 256-bit blake2b digest over ``url\\ntimestamp\\ntext``.

    Args:
        feed_url: URL of the feed the entry was published in
        timestamp: The entry's timestamp as written in the feed
        text: The message text as written in the feed

    Returns:
        A seven character hash string
    """
    payload = f"{feed_url}\n{normalize_timestamp(timestamp)}\n{text}"
    digest = hashlib.blake2b(payload.encode("utf-8"), digest_size=32).digest()
    encoded = base64.b32encode(digest).decode("ascii").rstrip("=").lower()
    return encoded[-HASH_LENGTH:]
