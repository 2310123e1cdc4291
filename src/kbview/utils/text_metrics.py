"""Word/character counting for markdown notes."""

from __future__ import annotations

import re
import string

__all__ = [
    "strip_frontmatter",
    "count_words",
    "count_characters",
    "is_markdown_path",
    "MARKDOWN_SUFFIXES",
]

MARKDOWN_SUFFIXES: tuple[str, ...] = (".md", ".markdown")

# A "---" line at offset 0, any run of lines, then a closing "---" line.
_FRONTMATTER_RE = re.compile(r"\A---\r?\n(?:[^\n]*\n)*?---(?:\r?\n|\Z)")
_MARKUP_RE = re.compile(r"[#*_`~\[\]()]")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_frontmatter(text: str) -> str:
    """Remove one leading frontmatter block; malformed blocks are kept."""
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return text
    return text[match.end():]


def count_words(text: str) -> int:
    """Count whitespace-separated words in the note body.

    Frontmatter is dropped and markup characters act as separators. Tokens
    made only of ASCII punctuation (the "!" left over from "**word**!") are
    not words; anything else, symbols and emoji included, is.
    """
    body = _MARKUP_RE.sub(" ", strip_frontmatter(text))
    return sum(1 for token in _WHITESPACE_RE.split(body) if token.strip(string.punctuation))


def count_characters(text: str) -> int:
    return len(text)


def is_markdown_path(path: str | None) -> bool:
    if not path:
        return False
    return path.lower().endswith(MARKDOWN_SUFFIXES)
