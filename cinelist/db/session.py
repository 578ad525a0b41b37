# cinelist/db/session.py
from __future__ import annotations

"""
Cinelist — Database Engine & Session Dependencies

- Async engine/session for FastAPI & tests (asyncpg in prod, aiosqlite in tests).
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from cinelist.core.config import settings

logger = logging.getLogger(__name__)

ASYNC_DATABASE_URL: str = settings.ASYNC_DATABASE_URL

# Pool knobs (ignored for SQLite)
_POOL_PRE_PING = True
_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30
_POOL_SIZE = 10
_MAX_OVERFLOW = 20


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return kwargs
    return {
        "pool_pre_ping": _POOL_PRE_PING,
        "pool_recycle": _POOL_RECYCLE,
        "pool_size": _POOL_SIZE,
        "max_overflow": _MAX_OVERFLOW,
        "pool_timeout": _POOL_TIMEOUT,
    }


def create_engine_for(url: str) -> AsyncEngine:
    """Build an async engine; SQLite gets foreign keys switched on for cascades."""
    engine = create_async_engine(url, echo=False, future=True, **_engine_kwargs(url))
    if url.startswith("sqlite"):
        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_fk_pragma(dbapi_conn, _record):  # pragma: no cover - driver hook
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
    return engine


# ─────────────────────────────────────────────────────────────
# ⚡ Async engine
# ─────────────────────────────────────────────────────────────

async_engine: AsyncEngine = create_engine_for(ASYNC_DATABASE_URL)

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def db_healthcheck() -> bool:
    """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "async_engine",
    "async_session_maker",
    "create_engine_for",
    "get_async_db",
    "db_healthcheck",
]
