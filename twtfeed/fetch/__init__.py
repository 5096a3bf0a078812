"""Feed retrieval for the twtxt feed reader."""

from .cache import fetch_and_cache_feed
from .fetcher import FeedFetcher, is_remote

__all__ = ["FeedFetcher", "fetch_and_cache_feed", "is_remote"]
