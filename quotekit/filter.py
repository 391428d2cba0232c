"""Join quotes and events onto a list of authors.

The authors file decides who is kept. Each author is keyed by the
signature of their name; events attach by full name signature, and
quotes attach by full name or last name signature::

    authors = load_authors("authors.txt", "###")
    attach_events(authors, read_delimited("events.txt", EventRecord, "###"))
    attach_quotes(
        authors,
        read_delimited("quotes.txt", QuoteRecord, "###"),
        max_size=120,
    )
    print(to_json(authors))

Matching on the last name alone is deliberately loose: a quote credited
to "Einstein" joins "Albert Einstein". Two authors sharing a last name
will both receive it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TypeVar

from quotekit.common.exceptions import (
    ConfigurationError,
    DataFormatError,
    InputFileError,
)
from quotekit.common.text import in_ascii_set
from quotekit.data_types import (
    AuthorEntry,
    AuthorEvent,
    AuthorRecord,
    DelimitedRecord,
    EventRecord,
    QuoteRecord,
)
from quotekit.signatures import create_name_sigs

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=DelimitedRecord)


def read_delimited(
    path: str | Path, record_type: type[R], delim: str
) -> Iterator[R]:
    """Read a delimited file into records.

    Lines starting with ``#`` and blank lines are skipped. The delimiter
    is literal and empty fields are kept, so ``q###a######`` has four
    fields.

    Args:
        path: Input file.
        record_type: Record model whose ``FIELDS`` give the layout.
        delim: Field delimiter, e.g. ``###``.

    Yields:
        One record per data line.

    Raises:
        ConfigurationError: If the delimiter is empty.
        InputFileError: If the file can't be opened.
        DataFormatError: If a line has the wrong number of fields.
    """
    if not delim:
        raise ConfigurationError("The field delimiter must not be empty.")

    file_path = Path(path)
    if not file_path.is_file():
        raise InputFileError(
            f"File '{file_path}' not found or is not readable."
        )

    expected = len(record_type.FIELDS)
    with open(file_path, encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.rstrip("\r\n")
            if line.startswith("#") or not line.strip():
                continue

            values = line.split(delim)
            if len(values) != expected:
                raise DataFormatError(
                    line,
                    expected_fields=expected,
                    actual_fields=len(values),
                    source=str(file_path),
                )
            yield record_type.from_fields(values)


def build_authors(records: Iterable[AuthorRecord]) -> dict[str, AuthorEntry]:
    """Key author records by name signature.

    A later record with the same signature replaces an earlier one.
    """
    authors: dict[str, AuthorEntry] = {}
    for record in records:
        name_sig, lname_sig = create_name_sigs(record.name)
        if name_sig in authors:
            logger.debug(f"Replacing duplicate author signature {name_sig}")
        authors[name_sig] = AuthorEntry(
            **record.model_dump(), lname_sig=lname_sig
        )
    return authors


def load_authors(path: str | Path, delim: str) -> dict[str, AuthorEntry]:
    """Read an authors file and key it by name signature."""
    return build_authors(read_delimited(path, AuthorRecord, delim))


def author_sigs(authors: dict[str, AuthorEntry], separator: str) -> str:
    """Return the sorted author signatures joined by *separator*.

    The list is handy as a tag vocabulary for other tools.
    """
    return separator.join(sorted(authors))


def attach_events(
    authors: dict[str, AuthorEntry], events: Iterable[EventRecord]
) -> int:
    """Attach events to the author with the same full name signature.

    Events for authors not in the mapping are dropped.

    Returns:
        Number of events attached.
    """
    attached = 0
    for event in events:
        name_sig, _ = create_name_sigs(event.author)
        author = authors.get(name_sig)
        if author is None:
            logger.debug(f"No author for event of '{event.author}'")
            continue

        author.events.append(
            AuthorEvent(
                event_date=event.event_date,
                event=event.event,
                tags=event.tags,
            )
        )
        attached += 1
    return attached


def quote_accepted(
    quote: QuoteRecord,
    max_size: int | None = None,
    ascii_only: bool = False,
) -> bool:
    """Apply the optional length and character-set filters to a quote."""
    if max_size and len(quote.quote) > max_size:
        return False
    return not (ascii_only and not in_ascii_set(quote.quote))


def attach_quotes(
    authors: dict[str, AuthorEntry],
    quotes: Iterable[QuoteRecord],
    max_size: int | None = None,
    ascii_only: bool = False,
) -> int:
    """Attach each quote to every author it matches.

    A quote matches an author when its author's full name signature or
    last name signature equals the author's. Authors are visited in
    signature order.

    Args:
        authors: Authors keyed by name signature.
        quotes: Quote records to distribute.
        max_size: Optional maximum quote length in characters.
        ascii_only: Drop quotes with characters outside printable ASCII.

    Returns:
        Number of (author, quote) attachments made.
    """
    ordered = sorted(authors.items())
    attached = 0

    for quote in quotes:
        if not quote_accepted(quote, max_size=max_size, ascii_only=ascii_only):
            logger.debug(f"Filtered out quote: {quote.quote[:60]}")
            continue

        name_sig, lname_sig = create_name_sigs(quote.author)
        for author_sig, author in ordered:
            if name_sig == author_sig or (
                lname_sig and lname_sig == author.lname_sig
            ):
                author.quotes.append(quote)
                attached += 1
                logger.debug(f"Quote by '{quote.author}' -> {author_sig}")
    return attached


def to_json(authors: dict[str, AuthorEntry], indent: int | None = None) -> str:
    """Serialize the joined authors for the loader.

    Returns:
        JSON object keyed by author signature.
    """
    return json.dumps(
        {sig: entry.model_dump() for sig, entry in sorted(authors.items())},
        indent=indent,
        ensure_ascii=False,
    )
