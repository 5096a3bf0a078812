"""Split raw twtxt documents into metadata and post records."""

import re

from twtfeed.models import Token
from twtfeed.timestamps import looks_like_timestamp

ARROW = "➤"

# Byte sequences some producers emit after decoding UTF-8 as cp1252.
MOJIBAKE = {
    "âž¤": ARROW,
}

METADATA_LINE = re.compile(r"^#\s*(?P<key>[^\s=#]+)\s*=\s*(?P<value>.*?)\s*$")
TAB_POST = re.compile(r"^(?P<timestamp>[^\s]+)\t(?P<message>.*)$", re.DOTALL)
LEGACY_POST = re.compile(r"^(?P<author>.*?)\s\((?P<timestamp>.*?)\):\s(?P<message>[\s\S]+)")


def normalize_line(line: str) -> str:
    """Repair known mangled glyph sequences."""
    for broken, fixed in MOJIBAKE.items():
        line = line.replace(broken, fixed)
    return line


def is_post_header(line: str) -> bool:
    """Check whether a line starts a post of its own.

    Tab-separated lines always do. The ``<user> (<timestamp>): <message>``
    shape counts only with a well-formed timestamp, so ordinary prose with a
    parenthesis and a colon stays part of the record it continues.
    """
    if TAB_POST.match(line):
        return True
    match = LEGACY_POST.match(line)
    return match is not None and looks_like_timestamp(match.group("timestamp").strip())


class _TokenStream:
    """Accumulates tokens for a single tokenize() call."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self._record: list[str] | None = None
        self._record_line = 0

    def emit(self, kind: str, content: str, line_no: int, encoding_error: bool = False) -> None:
        self.close_record()
        self.tokens.append(
            Token(kind=kind, content=content, line_no=line_no, encoding_error=encoding_error)
        )

    @property
    def in_record(self) -> bool:
        return self._record is not None

    def open_records(self, text: str, line_no: int) -> None:
        """Start one arrow-delimited record per ``➤`` in text.

        Anything before the first arrow continues the record already open.
        """
        head, *parts = text.split(ARROW)
        if head.strip() and self._record is not None:
            self._record.append(head.rstrip())
        for part in parts:
            self.close_record()
            self._record = [part.strip()]
            self._record_line = line_no

    def extend_record(self, line: str) -> None:
        self._record.append(line.rstrip())

    def close_record(self) -> None:
        if self._record is None:
            return
        content = "\n".join(self._record).strip()
        self._record = None
        if content:
            self.tokens.append(Token(kind="post", content=content, line_no=self._record_line))


def tokenize(raw: bytes) -> list[Token]:
    """Split a feed document into ordered metadata and post tokens.

    Each physical line is decoded on its own, so one invalid UTF-8 line only
    yields a post token flagged ``encoding_error``. Blank lines are dropped.
    Records opened by the ``➤`` delimiter of aggregated timelines absorb the
    plain lines that follow them; tab-separated posts are always one line.

    Args:
        raw: The feed document as fetched

    Returns:
        Tokens in source order
    """
    stream = _TokenStream()

    for line_no, raw_line in enumerate(raw.split(b"\n"), start=1):
        try:
            line = raw_line.decode("utf-8")
        except UnicodeDecodeError:
            text = raw_line.decode("utf-8", errors="replace").strip()
            stream.emit("post", text, line_no, encoding_error=True)
            continue

        if line_no == 1:
            line = line.removeprefix("\ufeff")
        line = normalize_line(line.rstrip("\r"))
        stripped = line.strip()

        if not stripped:
            continue

        if stripped.startswith("#"):
            kind = "metadata" if METADATA_LINE.match(stripped) else "post"
            stream.emit(kind, stripped, line_no)
        elif stripped.startswith(ARROW):
            stream.close_record()
            stream.open_records(stripped, line_no)
        elif is_post_header(stripped):
            # Trailing whitespace belongs to the message and its hash
            stream.emit("post", line.lstrip(), line_no)
        elif stream.in_record:
            if ARROW in line:
                stream.open_records(line, line_no)
            else:
                stream.extend_record(line)
        else:
            stream.emit("post", stripped, line_no)

    stream.close_record()
    return stream.tokens
