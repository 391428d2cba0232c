"""Text cleanup helpers shared by the scrapers, filter and loader.

Scraped HTML fragments carry entities, anchor tags, stray commas and
irregular whitespace. These helpers normalize such fragments into the
single-line text stored in delimited records.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_ENTITY_RE = re.compile(r"&[a-z]+;")
_ANCHOR_OPEN_RE = re.compile(r"<a href=[^>]+>")
_NON_ASCII_RE = re.compile(r"[^\x20-\x7e]")
_CONTROL_RE = re.compile(r"[^ -~\t]")
_KEYWORD_SPLIT_RE = re.compile(r"\s*,\s*")
_KEYWORD_RE = re.compile(r"^[a-z0-9\-]+$")


def trim(text: str) -> str:
    """Remove leading/trailing whitespace and collapse inner runs to one space."""
    return _WHITESPACE_RE.sub(" ", text.strip())


def trim_all(text: str) -> str:
    """Remove all whitespace from a string."""
    return _WHITESPACE_RE.sub("", text)


def trim_ctrl(text: str) -> str:
    """Remove control characters outside of the printable ASCII range.

    Tabs are kept. When the text ends in a line break (``\\n`` or
    ``\\r\\n``) a single ``\\n`` is preserved.

    Args:
        text: Text that may hold carriage returns or other control bytes.

    Returns:
        The cleaned text.
    """
    ends_with_newline = text.endswith("\n")
    cleaned = _CONTROL_RE.sub("", text)
    return cleaned + "\n" if ends_with_newline else cleaned


def has_carriage_return(text: str) -> bool:
    return "\r" in text


def cleanup_tags_text(text: str) -> str:
    """Normalize a scraped field fragment.

    Newlines become spaces, lowercase HTML entities (``&nbsp;``,
    ``&rdquo;``) are dropped, whitespace is trimmed and collapsed and a
    trailing comma is removed.

    Args:
        text: Raw text captured between field markers.

    Returns:
        Single-line cleaned text.

    Examples:
        >>> cleanup_tags_text("&ldquo;Be  yourself&rdquo;,\\n")
        'Be yourself'
    """
    text = text.replace("\n", " ")
    text = _ENTITY_RE.sub("", text)
    text = trim(text)
    if text.endswith(","):
        text = text[:-1].rstrip()
    return text


def url_cleanup(text: str) -> str:
    """Strip anchor tags and all whitespace from a tags fragment.

    Tag lists are rendered as links on most quote sites; what remains
    after this is a bare comma separated list.
    """
    text = _ANCHOR_OPEN_RE.sub("", text)
    text = text.replace("</a>", "")
    return trim_all(text)


def in_ascii_set(text: str) -> bool:
    """Check that text only holds printable ASCII (octal 040 to 176).

    Args:
        text: Quote text to check.

    Returns:
        True if every character is printable ASCII, False otherwise.
    """
    return _NON_ASCII_RE.search(text) is None


def validate_keywords(keywords: str) -> list[str]:
    """Split a comma separated keyword list and keep the valid ones.

    A valid keyword is non-empty and holds only lowercase letters, digits
    and dashes. Order is preserved.

    Args:
        keywords: Comma separated keywords, e.g. ``"love, life,Hope"``.

    Returns:
        Accepted keywords, e.g. ``["love", "life"]``.
    """
    return [
        keyword
        for keyword in _KEYWORD_SPLIT_RE.split(keywords.strip())
        if _KEYWORD_RE.match(keyword)
    ]
