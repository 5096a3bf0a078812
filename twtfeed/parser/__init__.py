"""twtxt document parsing: tokenizer, metadata extractor and entry parser."""

from .entries import parse_entries, parse_post, placeholder_entry, resolve_author, split_reply_subject
from .metadata import extract_metadata, parse_link
from .tokenizer import tokenize

__all__ = [
    "extract_metadata",
    "parse_entries",
    "parse_link",
    "parse_post",
    "placeholder_entry",
    "resolve_author",
    "split_reply_subject",
    "tokenize",
]
