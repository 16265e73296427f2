"""
Engine and session lifecycle.

A ``Database`` is opened once at process start (see the API lifespan) and
disposed at shutdown; request handlers receive sessions from it through
dependency injection instead of importing a module-level engine.
"""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


def normalize_database_url(url: str) -> str:
    """Point plain postgres URLs at the asyncpg driver."""
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseNotOpenError(RuntimeError):
    pass


class Database:
    def __init__(self, url: str, *, echo: bool = False) -> None:
        self._url = normalize_database_url(url)
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self._url).get_backend_name() == "sqlite"

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseNotOpenError("Database.open() has not been called")
        return self._engine

    async def open(self, *, create_tables: bool = False) -> None:
        if self._engine is not None:
            return

        self._engine = create_async_engine(self._url, echo=self._echo, **self._engine_options())
        if self.is_sqlite:
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._sessionmaker = async_sessionmaker(
            bind=self._engine,
            expire_on_commit=False,
            autoflush=False,
        )

        if create_tables:
            await self.create_tables()

        logger.info("database_opened", backend=make_url(self._url).get_backend_name())

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("database_closed")

    async def create_tables(self) -> None:
        # Registers the mapped tables on Base.metadata.
        from inventsync.infrastructure.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """One unit of work: commit on success, roll back on any exception."""
        if self._sessionmaker is None:
            raise DatabaseNotOpenError("Database.open() has not been called")
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _engine_options(self) -> dict[str, Any]:
        url = make_url(self._url)
        if not self.is_sqlite:
            return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}

        if url.database in (None, "", ":memory:"):
            # A single shared connection, otherwise every checkout sees an empty database.
            return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}

        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return {"connect_args": {"check_same_thread": False}}
