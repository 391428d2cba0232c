"""Load joined authors, quotes and events into the quotes database.

The loader consumes the JSON emitted by the filter stage. Every row is
looked up before it is inserted, so loading the same (or an overlapping)
file twice leaves the database unchanged:

- keywords by name
- authors by name signature
- quotes by author and quote text signature
- events by author, date and description
- keyword associations by their id pair

The whole load runs in one transaction.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import select
from typing_extensions import Self

from quotekit.common.exceptions import DataFormatError, QuotekitError
from quotekit.common.text import validate_keywords
from quotekit.data_types import AuthorEntry, AuthorEvent, QuoteRecord
from quotekit.loader.database import init_database
from quotekit.loader.models import (
    Author,
    Event,
    EventKeyword,
    Keyword,
    Quote,
    QuoteKeyword,
)
from quotekit.signatures import create_sig

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@dataclass
class LoadStats:
    """Counts of rows inserted and rows skipped as already present."""

    keywords_inserted: int = 0
    authors_inserted: int = 0
    authors_skipped: int = 0
    quotes_inserted: int = 0
    quotes_skipped: int = 0
    events_inserted: int = 0
    events_skipped: int = 0
    associations_inserted: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def parse_authors_json(text: str) -> dict[str, AuthorEntry]:
    """Parse filter output into author entries keyed by signature.

    Raises:
        DataFormatError: If the text isn't a JSON object of author entries.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise DataFormatError(text[:80], source="authors JSON") from e

    if not isinstance(raw, dict):
        raise DataFormatError(text[:80], source="authors JSON")

    try:
        return {
            sig: AuthorEntry.model_validate(entry) for sig, entry in raw.items()
        }
    except ValidationError as e:
        raise DataFormatError(str(e), source="authors JSON") from e


def extract_tags(authors: Mapping[str, AuthorEntry]) -> set[str]:
    """Collect the valid keywords used by any quote or event."""
    tags: set[str] = set()
    for entry in authors.values():
        for quote in entry.quotes:
            tags.update(validate_keywords(quote.tags))
        for author_event in entry.events:
            tags.update(validate_keywords(author_event.tags))
    return tags


class QuoteLoader:
    """Insert author entries into the quotes database.

    Example::

        async with QuoteLoader.open(Path("quotes.sqlite3")) as loader:
            stats = await loader.load(parse_authors_json(text))
    """

    def __init__(
        self,
        engine: AsyncEngine,
        session_factory: async_sessionmaker,
    ) -> None:
        """Initialize with an engine and session factory.

        Args:
            engine: An async SQLAlchemy engine.
            session_factory: An async session factory bound to the engine.
        """
        self._engine = engine
        self._session_factory = session_factory

    @classmethod
    @asynccontextmanager
    async def open(cls, db_path: Path) -> AsyncIterator[Self]:
        """Open (creating if needed) a database and create a loader.

        Args:
            db_path: Path to the SQLite database file.

        Yields:
            QuoteLoader instance.
        """
        engine, session_factory = await init_database(db_path)
        try:
            yield cls(engine, session_factory)
        finally:
            await engine.dispose()

    @property
    def engine(self) -> AsyncEngine:
        """Get the underlying async engine."""
        return self._engine

    async def load(self, authors: Mapping[str, AuthorEntry]) -> LoadStats:
        """Insert every author, quote, event and keyword not yet present.

        Args:
            authors: Author entries keyed by name signature.

        Returns:
            LoadStats for this load.
        """
        stats = LoadStats()
        keyword_ids: dict[str, int] = {}

        async with self._session_factory() as session:
            try:
                for tag in sorted(extract_tags(authors)):
                    keyword_ids[tag] = await self._keyword_id(
                        session, tag, stats
                    )

                for sig, entry in sorted(authors.items()):
                    author_id = await self._author_id(session, sig, entry, stats)

                    for quote in entry.quotes:
                        await self._load_quote(
                            session, author_id, quote, keyword_ids, stats
                        )
                    for author_event in entry.events:
                        await self._load_event(
                            session, author_id, author_event, keyword_ids, stats
                        )

                await session.commit()
            except Exception:
                await session.rollback()
                raise

        logger.info(f"Load complete: {stats.as_dict()}")
        return stats

    # ------------------------------------------------------------------
    # Lookups and inserts
    # ------------------------------------------------------------------

    async def _keyword_id(
        self, session: AsyncSession, name: str, stats: LoadStats
    ) -> int:
        result = await session.execute(
            select(Keyword.id).where(Keyword.name == name)
        )
        existing = result.scalar()
        if existing is not None:
            return existing

        keyword = Keyword(name=name)
        session.add(keyword)
        await session.flush()
        stats.keywords_inserted += 1
        logger.debug(f"Inserted keyword {name}")
        return _row_id(keyword)

    async def _author_id(
        self,
        session: AsyncSession,
        sig: str,
        entry: AuthorEntry,
        stats: LoadStats,
    ) -> int:
        result = await session.execute(
            select(Author.id).where(Author.name_sig == sig)
        )
        existing = result.scalar()
        if existing is not None:
            stats.authors_skipped += 1
            return existing

        author = Author(
            name=entry.name,
            name_sig=sig,
            birth_date=entry.birth_date or None,
            death_date=entry.death_date or None,
            description=entry.description or None,
            bio_url=entry.bio_url or None,
        )
        session.add(author)
        await session.flush()
        stats.authors_inserted += 1
        logger.debug(f"Inserted author {entry.name}")
        return _row_id(author)

    async def _load_quote(
        self,
        session: AsyncSession,
        author_id: int,
        quote: QuoteRecord,
        keyword_ids: dict[str, int],
        stats: LoadStats,
    ) -> None:
        sig = create_sig(quote.quote)
        result = await session.execute(
            select(Quote.id).where(
                Quote.author_id == author_id, Quote.sig == sig
            )
        )
        quote_id = result.scalar()

        if quote_id is None:
            row = Quote(
                author_id=author_id,
                body=quote.quote,
                source=quote.source or None,
                sig=sig,
            )
            session.add(row)
            await session.flush()
            quote_id = _row_id(row)
            stats.quotes_inserted += 1
        else:
            stats.quotes_skipped += 1

        for tag in validate_keywords(quote.tags):
            result = await session.execute(
                select(QuoteKeyword).where(
                    QuoteKeyword.quote_id == quote_id,
                    QuoteKeyword.keyword_id == keyword_ids[tag],
                )
            )
            if result.first() is None:
                session.add(
                    QuoteKeyword(quote_id=quote_id, keyword_id=keyword_ids[tag])
                )
                await session.flush()
                stats.associations_inserted += 1

    async def _load_event(
        self,
        session: AsyncSession,
        author_id: int,
        author_event: AuthorEvent,
        keyword_ids: dict[str, int],
        stats: LoadStats,
    ) -> None:
        result = await session.execute(
            select(Event.id).where(
                Event.author_id == author_id,
                Event.event_date == author_event.event_date,
                Event.description == author_event.event,
            )
        )
        event_id = result.scalar()

        if event_id is None:
            row = Event(
                author_id=author_id,
                event_date=author_event.event_date,
                description=author_event.event,
            )
            session.add(row)
            await session.flush()
            event_id = _row_id(row)
            stats.events_inserted += 1
        else:
            stats.events_skipped += 1

        for tag in validate_keywords(author_event.tags):
            result = await session.execute(
                select(EventKeyword).where(
                    EventKeyword.event_id == event_id,
                    EventKeyword.keyword_id == keyword_ids[tag],
                )
            )
            if result.first() is None:
                session.add(
                    EventKeyword(event_id=event_id, keyword_id=keyword_ids[tag])
                )
                await session.flush()
                stats.associations_inserted += 1


def _row_id(row: Any) -> int:
    """Return the primary key assigned to a flushed row."""
    if row.id is None:
        raise QuotekitError(
            f"No id was assigned to the {type(row).__name__} row after flush"
        )
    return row.id


async def load_file(db_path: Path, text: str) -> LoadStats:
    """Parse filter output and load it into the database at *db_path*."""
    authors = parse_authors_json(text)
    async with QuoteLoader.open(db_path) as loader:
        return await loader.load(authors)
