"""
Game Catalog API — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory and session scope helper.
Why:   One pooled engine per process; every request borrows a session
       and returns its connection when the request ends.
How:   Creates an async engine with connection pooling and provides a
       context manager that commits on success and rolls back on error.
Who:   Used by the repository dependency (dependencies.py), the
       health check and the seed command.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling:
    pool_size / max_overflow come from settings (DB_POOL_SIZE, DB_MAX_OVERFLOW).
    pool_pre_ping validates connections before use.
    pool_recycle=3600 recycles connections every hour.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from gamecatalog.config import settings


# ── Engine Configuration ──────────────────────────────────────────────────
# Only used when STORAGE_BACKEND=postgres; create_async_engine does not
# connect until the first query, so importing this module works offline.
engine = create_async_engine(
    settings.database_url,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=settings.db_pool_pre_ping,
    pool_recycle=3600,
    echo=settings.log_level == "DEBUG",
)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: returned documents stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# All ORM models inherit from Base; alembic/env.py reads Base.metadata
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


@asynccontextmanager
async def session_scope() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a transactional session.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller
        3. On success: commits the transaction
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example usage:
        async with session_scope() as session:
            repo = SqlGameRepository(session)
            await repo.insert(document)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        # Any failure (StorageError, NotFoundError, validation) undoes the
        # whole request's writes before the error propagates
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency wrapper around :func:`session_scope`."""
    async with session_scope() as session:
        yield session


async def dispose_engine() -> None:
    """Close all pooled connections. Called during application shutdown."""
    await engine.dispose()
