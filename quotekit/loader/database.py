"""Engine setup for the quotes database.

The database is a single SQLite file opened through aiosqlite. Opening it
creates any missing tables and stamps the schema version the first time.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, select

from quotekit.loader.models import *  # noqa: F401, F403
from quotekit.loader.models import SchemaInfo

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _enable_foreign_keys(dbapi_conn: Any, connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def create_engine_and_init(
    db_path: Path,
    echo: bool = False,
) -> AsyncEngine:
    """Open the database file, creating tables that don't exist yet.

    Args:
        db_path: Path to the SQLite database file.
        echo: Whether to echo SQL statements (for debugging).

    Returns:
        An AsyncEngine with the schema in place.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with AsyncSession(engine) as session:
        if await get_schema_version(session) == 0:
            logger.info(f"Initializing quotes database at {db_path}")
            session.add(SchemaInfo(version=SCHEMA_VERSION))
            await session.commit()

    return engine


async def init_database(
    db_path: Path,
    echo: bool = False,
) -> tuple[AsyncEngine, async_sessionmaker]:
    """Open the database and return the engine with a session factory.

    Sessions keep loaded rows usable after commit, so ids assigned during
    a load can still be read once it has been committed.
    """
    engine = await create_engine_and_init(db_path, echo=echo)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


async def get_schema_version(session: AsyncSession) -> int:
    """Return the newest recorded schema version, or 0 for a new file."""
    result = await session.execute(
        select(SchemaInfo.version)
        .order_by(SchemaInfo.version.desc())  # type: ignore[attr-defined]
        .limit(1)
    )
    return result.scalar() or 0
