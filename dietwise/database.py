"""
Dietwise — Async Database Engine & Session Factory

Builds a single async engine from ``DATABASE_URL``:

1. **PostgreSQL** – ``postgresql+asyncpg://`` with pool tuning.  A plain
   ``postgresql://`` URL is upgraded to the asyncpg dialect transparently.

2. **SQLite** – ``sqlite+aiosqlite://`` for local runs and tests.  SQLite
   does not take the queue-pool sizing arguments, so they are omitted.

Every request gets its own ``AsyncSession`` through the ``get_db`` async
generator; the session commits when the route returns and rolls back on
any exception, which makes each request one unit of work.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from dietwise.config import get_settings

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# Declarative base for all ORM models
# ------------------------------------------------------------------ #

class Base(DeclarativeBase):
    """Shared declarative base.

    Every SQLAlchemy model in the project should inherit from this class::

        from dietwise.database import Base

        class Participant(Base):
            __tablename__ = "participants"
            ...
    """
    pass


def utcnow() -> datetime:
    """Python-side default for timestamp columns.

    Used alongside ``server_default=func.now()`` so freshly flushed rows
    carry their timestamp without a refresh round-trip.
    """
    return datetime.now(timezone.utc)


# ------------------------------------------------------------------ #
# Engine construction
# ------------------------------------------------------------------ #

def _normalise_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to ``DATABASE_URL``)."""
    settings = get_settings()
    url = _normalise_url(url or settings.DATABASE_URL)

    kwargs: dict = {"echo": settings.LOG_LEVEL == "DEBUG"}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
        )

    engine = create_async_engine(url, **kwargs)
    logger.info("Database engine created (%s)", engine.url.get_backend_name())
    return engine


# ------------------------------------------------------------------ #
# Module-level engine & session factory
# ------------------------------------------------------------------ #

engine = build_engine()

async_session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ------------------------------------------------------------------ #
# FastAPI dependency
# ------------------------------------------------------------------ #

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an ``AsyncSession`` and ensure it is closed afterwards.

    Usage in a FastAPI route::

        from fastapi import Depends
        from dietwise.database import get_db

        @router.get("/participants")
        async def list_participants(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
