"""Render formatted messages as HTML fragments."""

from html import escape

from twtfeed.models import FormattedMessage, Span

from .formatter import is_link


def _anchor(href: str, label: str) -> str:
    return (
        f'<a href="{escape(href)}" target="_blank" rel="noopener noreferrer">'
        f"{escape(label)}</a>"
    )


def render_span(span: Span) -> str:
    """Render one span; only http(s) URLs ever become anchors."""
    if span.kind == "link" and span.url and is_link(span.url):
        return _anchor(span.url, span.value)
    if span.kind == "mention":
        label = f"@{span.value}"
        if span.url and is_link(span.url):
            return _anchor(span.url, label)
        return escape(label)
    return escape(span.value).replace("\n", "<br>")


def render_html(message: FormattedMessage) -> str:
    """Render a message as a paragraph followed by its images.

    All user text is escaped, so the result is safe to embed in a page.
    """
    body = "".join(render_span(span) for span in message.spans)
    images = "".join(
        f'<img class="twt-image" src="{escape(url)}" alt="image from {escape(url)}" loading="lazy">'
        for url in message.images
    )
    return f"<p>{body}</p>{images}"
