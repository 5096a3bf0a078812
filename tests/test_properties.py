"""Property-based tests for the parsing and formatting pipeline."""

from datetime import datetime, timezone

from hypothesis import given
from hypothesis import strategies as st

from twtfeed.models import Span
from twtfeed.parser import extract_metadata, parse_entries, tokenize
from twtfeed.render import format_message

words = st.from_regex(r"[a-z]{1,8}( [a-z]{1,8}){0,5}", fullmatch=True)
values = st.from_regex(r"[A-Za-z0-9_]{1,12}", fullmatch=True)
timestamps = st.datetimes(
    min_value=datetime(2000, 1, 1),
    max_value=datetime(2099, 12, 31),
    timezones=st.just(timezone.utc),
).map(lambda dt: dt.replace(microsecond=0).isoformat())


class TestFormatterProperties:
    """Properties of format_message."""

    @given(st.text())
    def test_idempotent(self, message):
        """Formatting the same text twice gives the same result."""
        assert format_message(message) == format_message(message)

    @given(st.text().filter(lambda s: "://" not in s and "@" not in s))
    def test_text_without_links_is_single_span(self, message):
        """Text with no URLs or mentions is one text span and no images."""
        formatted = format_message(message)

        assert formatted.spans == (Span(kind="text", value=message),)
        assert formatted.images == ()

    @given(st.text())
    def test_spans_reassemble_message(self, message):
        """Text and link spans never lose characters of the message."""
        formatted = format_message(message.replace("@", ""))
        assert "".join(span.value for span in formatted.spans) == message.replace("@", "")


class TestMetadataProperties:
    """Properties of extract_metadata."""

    @given(
        nick=values,
        avatar=values,
        description=words,
        posts=st.lists(st.tuples(timestamps, words), max_size=5),
        data=st.data(),
    )
    def test_keys_found_in_any_position(self, nick, avatar, description, posts, data):
        """Metadata lines are found wherever they are placed."""
        lines = [
            f"# nick = {nick}",
            f"# avatar = https://img.example/{avatar}.png",
            f"# description = {description}",
            "# x-unknown-key = ignored",
        ] + [f"{ts}\t{msg}" for ts, msg in posts]
        lines = data.draw(st.permutations(lines))

        metadata = extract_metadata(tokenize("\n".join(lines).encode("utf-8")))

        assert metadata.nick == nick
        assert metadata.avatar == f"https://img.example/{avatar}.png"
        assert metadata.description == description


class TestEntryProperties:
    """Properties of parse_entries."""

    @given(
        st.lists(
            st.one_of(
                st.tuples(st.just("valid"), timestamps, words),
                st.tuples(st.just("broken"), st.just(""), words),
            ),
            min_size=1,
            max_size=12,
        )
    )
    def test_one_entry_per_valid_line(self, lines):
        """Valid lines map to entries in order; broken lines are only skipped."""
        text = "\n".join(
            f"{ts}\t{msg}" if kind == "valid" else msg for kind, ts, msg in lines
        )
        result = parse_entries(tokenize(text.encode("utf-8")), author="alice")

        valid = [(ts, msg) for kind, ts, msg in lines if kind == "valid"]
        broken = [msg for kind, _, msg in lines if kind == "broken"]

        assert len(result.skipped) == len(broken)
        if valid:
            assert [(e.timestamp, e.raw_message) for e in result.entries] == valid
            assert all(e.author == "alice" for e in result.entries)
        else:
            assert result.empty is True
            assert len(result.entries) == 1

    @given(st.lists(st.tuples(values, timestamps, words), min_size=1, max_size=8))
    def test_legacy_lines_split_correctly(self, lines):
        """``user (timestamp): message`` lines yield author, time and text."""
        text = "\n".join(f"{user} ({ts}): {msg}" for user, ts, msg in lines)
        result = parse_entries(tokenize(text.encode("utf-8")))

        assert [(e.author, e.timestamp, e.raw_message) for e in result.entries] == lines
