"""Message rendering for twtxt entries."""

from .formatter import IMAGE_EXTENSIONS, feed_directory, format_message, is_image_url
from .markup import render_html

__all__ = [
    "IMAGE_EXTENSIONS",
    "feed_directory",
    "format_message",
    "is_image_url",
    "render_html",
]
