"""
Idea Portal – Async SQLAlchemy engine, session factory, declarative base
and schema helpers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # Enforce foreign keys so idea/score cascades hold on SQLite too
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine with per-backend connection options."""
    kwargs: Dict[str, Any] = {
        "echo": settings.DEBUG and settings.LOG_LEVEL == "DEBUG",
        "future": True,
    }

    if url.startswith("postgresql"):
        # PgBouncer in transaction mode cannot share prepared statements
        kwargs["connect_args"] = {"statement_cache_size": 0}
    elif url.startswith("sqlite"):
        # aiosqlite connections are bound to the event loop that opened them
        kwargs["poolclass"] = NullPool

    new_engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


engine = build_engine(settings.DATABASE_URL)

async_session = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# ── Schema ──
async def init_models() -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Database schema ready")


async def drop_models() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ── Request-scoped session ──
async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield a session; commit when the request succeeds, roll back otherwise."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
