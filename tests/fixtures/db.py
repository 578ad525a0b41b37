# tests/fixtures/db.py
"""
DB fixtures for tests (async, SQLite via aiosqlite):
- One throwaway database file per test (no cross-test leakage, no truncation)
- Foreign keys on, so list deletes cascade like PostgreSQL
- Function-scoped sessions; each HTTP request gets its own session
"""

from typing import AsyncGenerator, Callable

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinelist.db import base
from cinelist.db.session import create_engine_for


@pytest.fixture(scope="session", autouse=True)
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine(tmp_path):
    eng = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'cinelist.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(base.Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture()
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging rows directly; assertions should use `count_rows`."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def count_rows(session_factory) -> Callable:
    """`await count_rows(Model, Model.col == value, ...)` on a fresh session."""
    async def _count(model, *where) -> int:
        async with session_factory() as session:
            stmt = select(func.count()).select_from(model)
            if where:
                stmt = stmt.where(*where)
            return int((await session.execute(stmt)).scalar_one())
    return _count


def get_override_get_db(factory: async_sessionmaker):
    """FastAPI dependency override: a fresh session from the test database per request."""
    async def _override() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
    return _override
