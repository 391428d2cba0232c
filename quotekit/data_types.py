"""Record types exchanged between pipeline stages.

Stages talk to each other through delimited text files: one record per
line, fields joined by a configurable delimiter such as ``###``. Each
record model knows its field layout so it can be rendered to and built
from such a line.

After the filter stage, authors carry their matched quotes and events
and are serialized to JSON for the loader.
"""

from __future__ import annotations

from typing import ClassVar, TypeVar

from sqlmodel import Field, SQLModel

R = TypeVar("R", bound="DelimitedRecord")


class DelimitedRecord(SQLModel):
    """Base class for records stored as delimited lines.

    Subclasses list their columns, in file order, in ``FIELDS``.
    """

    FIELDS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_fields(cls: type[R], values: list[str]) -> R:
        """Build a record from already split field values.

        Args:
            values: Field values in ``FIELDS`` order.

        Returns:
            The record instance.
        """
        return cls(**dict(zip(cls.FIELDS, values)))

    def to_line(self, delim: str) -> str:
        """Render the record as a single delimited line (no newline)."""
        return delim.join(str(getattr(self, name)) for name in self.FIELDS)


class QuoteRecord(DelimitedRecord):
    """A scraped quotation.

    ``tags`` is a comma separated keyword list, possibly empty.
    """

    FIELDS: ClassVar[tuple[str, ...]] = ("quote", "author", "source", "tags")

    quote: str
    author: str
    source: str = ""
    tags: str = ""


class AuthorRecord(DelimitedRecord):
    """Biographical information about an author."""

    FIELDS: ClassVar[tuple[str, ...]] = (
        "name",
        "birth_date",
        "death_date",
        "description",
        "bio_url",
    )

    name: str
    birth_date: str = ""
    death_date: str = ""
    description: str = ""
    bio_url: str = ""


class EventRecord(DelimitedRecord):
    """A dated event in an author's life."""

    FIELDS: ClassVar[tuple[str, ...]] = ("author", "event_date", "event", "tags")

    author: str
    event_date: str
    event: str
    tags: str = ""


class AuthorEvent(SQLModel):
    """An event attached to an author (author name implied by the owner)."""

    event_date: str
    event: str
    tags: str = ""


class AuthorEntry(AuthorRecord):
    """An author with the quotes and events joined onto it.

    This is the unit the filter stage emits and the loader consumes.
    """

    lname_sig: str = ""
    quotes: list[QuoteRecord] = Field(default_factory=list)
    events: list[AuthorEvent] = Field(default_factory=list)
