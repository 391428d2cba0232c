"""SQLModel table definitions for the quotes database.

Tables:
- keyword: distinct keywords (tags)
- author: profiled authors, unique by name signature
- quote: quotations, unique per author by text signature
- event: dated events in an author's life
- quote_keyword / event_keyword: keyword associations
- schema_info: schema version tracking
"""

from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class SchemaInfo(SQLModel, table=True):  # type: ignore[call-arg]
    """Schema version tracking."""

    __tablename__ = "schema_info"

    id: int | None = Field(default=None, primary_key=True)
    version: int
    applied_at: str | None = Field(
        default=None,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
    )


class Keyword(SQLModel, table=True):  # type: ignore[call-arg]
    """A keyword that quotes and events can be tagged with."""

    __tablename__ = "keyword"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True)


class Author(SQLModel, table=True):  # type: ignore[call-arg]
    """An author with biographical details."""

    __tablename__ = "author"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    name_sig: str = Field(unique=True, index=True)
    birth_date: str | None = None
    death_date: str | None = None
    description: str | None = None
    bio_url: str | None = None
    created_at: str | None = Field(
        default=None,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
    )


class Quote(SQLModel, table=True):  # type: ignore[call-arg]
    """A quotation attributed to an author."""

    __tablename__ = "quote"
    __table_args__ = (
        sa.UniqueConstraint("author_id", "sig", name="uq_quote_author_sig"),
    )

    id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="author.id", index=True)
    body: str
    source: str | None = None
    sig: str
    created_at: str | None = Field(
        default=None,
        sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")},
    )


class Event(SQLModel, table=True):  # type: ignore[call-arg]
    """A dated event in an author's life."""

    __tablename__ = "event"
    __table_args__ = (
        sa.UniqueConstraint(
            "author_id",
            "event_date",
            "description",
            name="uq_event_author_date_description",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    author_id: int = Field(foreign_key="author.id", index=True)
    event_date: str
    description: str


class QuoteKeyword(SQLModel, table=True):  # type: ignore[call-arg]
    """Association between a quote and a keyword."""

    __tablename__ = "quote_keyword"

    quote_id: int = Field(foreign_key="quote.id", primary_key=True)
    keyword_id: int = Field(foreign_key="keyword.id", primary_key=True)


class EventKeyword(SQLModel, table=True):  # type: ignore[call-arg]
    """Association between an event and a keyword."""

    __tablename__ = "event_keyword"

    event_id: int = Field(foreign_key="event.id", primary_key=True)
    keyword_id: int = Field(foreign_key="keyword.id", primary_key=True)
