"""Record Store database: SQLite through aiosqlite.

One commit per mutation and last write wins, so WAL plus a busy timeout is
enough for concurrent request handlers writing the same file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sharebox.config import settings
from sharebox.models.base import Base

logger = logging.getLogger(__name__)

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def _configure_sqlite(dbapi_conn, _connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=5000")  # ms
    cursor.close()


def database_url(path: str | Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


def make_engine(url: str | None = None) -> AsyncEngine:
    """Engine for ``url``, defaulting to the configured database file."""
    if url is None:
        db_file = Path(settings.database_path)
        db_file.parent.mkdir(parents=True, exist_ok=True)
        url = database_url(db_file)

    options: dict = {"echo": settings.debug and settings.log_level == "DEBUG"}
    if url != MEMORY_URL:
        # In-memory databases get a static pool that takes no sizing
        options.update(pool_size=settings.max_db_connections, max_overflow=0)

    new_engine = create_async_engine(url, **options)
    event.listen(new_engine.sync_engine, "connect", _configure_sqlite)
    return new_engine


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = make_engine()
async_session = make_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    await create_tables(engine)
    logger.info("Record store ready at %s", engine.url.database)
