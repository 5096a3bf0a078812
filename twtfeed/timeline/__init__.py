"""Timeline aggregation across several twtxt feeds."""

from .aggregator import aggregate_timelines, build_reply_index, decode_cursor, make_cursor, reply_target

__all__ = [
    "aggregate_timelines",
    "build_reply_index",
    "decode_cursor",
    "make_cursor",
    "reply_target",
]
