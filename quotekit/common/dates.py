"""Date helpers.

- ``datestamp`` renders a timestamp with a small token format
  (``YYYY``/``YY``, ``MM``, ``DD``, ``hh``, ``mm``, ``ss``).
- ``parse_date_components`` pulls year, month and day out of free-form
  date text such as ``"March 14, 1879"`` or ``"14/3/1879"``;
  ``date2comps`` returns the same parts as a list.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import NamedTuple

from quotekit.common.text import trim

MONTH_NUMBERS: dict[str, str] = {
    "january": "01",
    "february": "02",
    "march": "03",
    "april": "04",
    "may": "05",
    "june": "06",
    "july": "07",
    "august": "08",
    "september": "09",
    "october": "10",
    "november": "11",
    "december": "12",
    # Abbreviations
    "jan": "01",
    "feb": "02",
    "mar": "03",
    "apr": "04",
    "jun": "06",
    "jul": "07",
    "aug": "08",
    "sep": "09",
    "sept": "09",
    "oct": "10",
    "nov": "11",
    "dec": "12",
}

_NON_ALNUM_RE = re.compile(r"[^0-9a-zA-Z]")
_YEAR_RE = re.compile(r"^\d{3,4}$")
_WORD_RE = re.compile(r"^[a-z]+$")
_SHORT_NUM_RE = re.compile(r"^\d{1,2}$")


def datestamp(timestamp: float | None = None, fmt: str | None = None) -> str:
    """Generate a datestamp, ``YYYYMMDD`` unless a format is given.

    The first run of each token letter in *fmt* is replaced: ``YYYY`` by
    the four digit year (any other run of ``Y`` by the two digit year),
    ``M`` by month, ``D`` by day, ``h`` by hour, ``m`` by minute and
    ``s`` by second. All values are zero padded.

    Args:
        timestamp: Seconds since the epoch. None means now.
        fmt: Optional token format, e.g. ``"YYYY-MM-DD hh:mm:ss"``.

    Returns:
        The formatted datestamp in local time.
    """
    moment = (
        datetime.fromtimestamp(timestamp)
        if timestamp is not None
        else datetime.now()
    )
    year = f"{moment.year:04d}"
    month = f"{moment.month:02d}"
    day = f"{moment.day:02d}"

    if not fmt:
        return f"{year}{month}{day}"

    if "YYYY" in fmt:
        fmt = fmt.replace("YYYY", year, 1)
    else:
        fmt = re.sub(r"Y+", year[2:], fmt, count=1)
    fmt = re.sub(r"M+", month, fmt, count=1)
    fmt = re.sub(r"D+", day, fmt, count=1)
    fmt = re.sub(r"h+", f"{moment.hour:02d}", fmt, count=1)
    fmt = re.sub(r"m+", f"{moment.minute:02d}", fmt, count=1)
    fmt = re.sub(r"s+", f"{moment.second:02d}", fmt, count=1)
    return fmt


class DateComponents(NamedTuple):
    """Zero padded date parts; an unknown part is an empty string."""

    year: str
    month: str
    day: str


def parse_date_components(date_str: str) -> DateComponents:
    """Parse the year, month and day components of a date string.

    Three or four digit numbers are the year. Month names map to their
    two digit number. A one or two digit number is the month when it is
    the second component seen and no month name was found; otherwise it
    is the day. So ``"4/7/1776"`` reads day first, and the ``10`` in
    ``"10, 1815"`` is a day.

    Examples:
        >>> parse_date_components("10, 1815")
        DateComponents(year='1815', month='', day='10')
    """
    normalized = trim(_NON_ALNUM_RE.sub(" ", date_str)).lower()

    year = ""
    month = ""
    day = ""
    count = 0
    for comp in normalized.split(" "):
        if _YEAR_RE.match(comp):
            year = comp
            count += 1
        elif _WORD_RE.match(comp):
            if comp in MONTH_NUMBERS:
                month = MONTH_NUMBERS[comp]
                count += 1
        elif _SHORT_NUM_RE.match(comp):
            if count == 1 and not month:
                month = comp.zfill(2)
            else:
                day = comp.zfill(2)
            count += 1

    return DateComponents(year=year, month=month, day=day)


def date2comps(date_str: str) -> list[str]:
    """Parse a date string into a ``[year, month, day]`` list.

    Any unknown component is left out, so the list alone doesn't tell
    which parts were found. Use ``parse_date_components`` when that
    matters.

    Examples:
        >>> date2comps("March 14, 1879")
        ['1879', '03', '14']
        >>> date2comps("1879-3-14")
        ['1879', '03', '14']
    """
    return [comp for comp in parse_date_components(date_str) if comp]
