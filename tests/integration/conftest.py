from collections.abc import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from inventsync.infrastructure.database.connection import Database


@pytest_asyncio.fixture()
async def database() -> AsyncGenerator[Database, None]:
    db = Database("sqlite+aiosqlite://")
    await db.open(create_tables=True)
    yield db
    await db.close()


@pytest_asyncio.fixture()
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as s:
        yield s
