"""Parse dated events out of a people file.

A people file is a hand-maintained list of profiled persons::

    # Physicists
    Name: Albert Einstein
    Tags: physics, science
    March 14, 1879: Born in Ulm, Germany
    April 18, 1955: Died in Princeton, New Jersey

    Name: Marie Curie
    7 November 1867: Born in Warsaw

``Name:`` starts a person, ``Tags:`` sets the keywords attached to that
person's events, and any other ``<date>: <event>`` line is an event. The
events are sorted by month and day, then year, so the output reads as an
"on this day" calendar.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from quotekit.common.dates import parse_date_components
from quotekit.common.exceptions import DataFormatError, InputFileError
from quotekit.common.text import trim, validate_keywords
from quotekit.data_types import EventRecord

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"^Name:\s+(.+)$")
_TAGS_RE = re.compile(r"^Tags:\s*(.*)$")


def parse_people(lines: Iterable[str]) -> list[EventRecord]:
    """Parse people file lines into events sorted by month/day/year.

    Args:
        lines: Lines of a people file.

    Returns:
        Events with ``event_date`` as ``YYYY-MM-DD`` (or ``YYYY-MM``
        when the day is unknown).

    Raises:
        DataFormatError: If an event appears before any ``Name:`` line.
    """
    person: str | None = None
    tags = ""
    events: list[tuple[tuple[str, str, int], EventRecord]] = []

    for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line.startswith("#") or not line.strip():
            continue

        name_match = _NAME_RE.match(line)
        if name_match:
            person = trim(name_match.group(1))
            tags = ""
            logger.debug(f"Person: {person}")
            continue

        tags_match = _TAGS_RE.match(line)
        if tags_match:
            tags = ",".join(validate_keywords(tags_match.group(1).lower()))
            continue

        date_text, sep, event_text = line.partition(":")
        if not sep or not event_text.strip():
            logger.warning(f"Skipping unrecognized line: {line}")
            continue
        if person is None:
            raise DataFormatError(line)

        comps = parse_date_components(date_text)
        if not comps.year or not comps.month:
            logger.warning(
                f"Skipping event of {person} without year and month: {line}"
            )
            continue

        event = EventRecord(
            author=person,
            event_date="-".join(part for part in comps if part),
            event=trim(event_text),
            tags=tags,
        )
        events.append(((comps.month, comps.day, int(comps.year)), event))

    events.sort(key=lambda item: item[0])
    return [event for _, event in events]


def parse_people_file(path: str | Path) -> list[EventRecord]:
    """Parse a people file from disk.

    Raises:
        InputFileError: If the file doesn't exist.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise InputFileError(
            f"File '{file_path}' not found or is not readable."
        )
    with open(file_path, encoding="utf-8") as handle:
        return parse_people(handle)
