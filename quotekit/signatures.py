"""Name and text signatures.

A signature is the normalized form of an author name or quote text used
as a join and deduplication key: ``"Martin Luther King, Jr."`` and
``"martin luther king jr."`` both become ``martin-luther-king``.
"""

from __future__ import annotations

import re

from quotekit.common.text import trim

_SUFFIX_RE = re.compile(r"\W(jr|sr)\.")
_PREFIX_RE = re.compile(r"^sir\W")
_NON_ALPHA_RE = re.compile(r"[^a-z ]")


def _normalize(text: str) -> str:
    """Lowercase, drop honorifics and keep only letters and single spaces."""
    text = text.lower()

    # Only the first suffix is removed
    text = _SUFFIX_RE.sub("", text, count=1)
    text = _PREFIX_RE.sub("", text, count=1)

    # Trim again so dropped punctuation can't leave edge or double spaces
    return trim(_NON_ALPHA_RE.sub("", trim(text)))


def create_sig(text: str) -> str:
    """Create the signature of a name or quote text.

    Args:
        text: Author name or quote text.

    Returns:
        Lowercase letters with dashes in place of spaces.

    Examples:
        >>> create_sig("Sir Winston Churchill")
        'winston-churchill'
        >>> create_sig("Martin Luther King, Jr.")
        'martin-luther-king'
    """
    return _normalize(text).replace(" ", "-")


def create_name_sigs(name: str) -> tuple[str, str]:
    """Create the full name and last name signatures of an author.

    The last name is the last space separated word after normalization,
    which for a single-word name is the name itself.

    Args:
        name: Author name as scraped.

    Returns:
        Tuple of (name_sig, lname_sig).

    Examples:
        >>> create_name_sigs("Albert Einstein")
        ('albert-einstein', 'einstein')
    """
    normalized = _normalize(name)
    words = normalized.split(" ")
    return normalized.replace(" ", "-"), words[-1]
