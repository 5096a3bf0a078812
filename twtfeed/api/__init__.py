"""API routers for the twtxt feed reader."""

from twtfeed.api.routes_feed import router as feed_router
from twtfeed.api.routes_health import router as health_router
from twtfeed.api.routes_timeline import router as timeline_router

__all__ = [
    "feed_router",
    "health_router",
    "timeline_router",
]
