"""
Async database access (SQLAlchemy Core + asyncpg).

The app, the reminder lookups and the notification log share one lazily
created engine. Alembic uses the same DATABASE_URL through a psycopg2 driver.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

_engine: AsyncEngine | None = None

_DRIVER_PREFIXES = ("postgresql+asyncpg://", "postgresql+psycopg2://", "postgresql://")


def _with_driver(database_url: str, scheme: str) -> str:
    """Swap whatever postgres driver prefix the URL has for `scheme`."""
    for prefix in _DRIVER_PREFIXES:
        if database_url.startswith(prefix):
            return scheme + database_url[len(prefix):]
    raise ValueError(f"DATABASE_URL must be a PostgreSQL URL, got {database_url!r}")


def _require_database_url() -> str:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise ValueError("DATABASE_URL environment variable must be set")
    return database_url


def is_configured() -> bool:
    """True when DATABASE_URL is set."""
    return bool(os.environ.get("DATABASE_URL"))


def get_engine() -> AsyncEngine:
    """Get or create the shared async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            _with_driver(_require_database_url(), "postgresql+asyncpg://"),
            echo=os.environ.get("SQL_ECHO", "").lower() == "true",
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
    return _engine


@asynccontextmanager
async def get_connection() -> AsyncGenerator[AsyncConnection, None]:
    """
    Pooled connection without an implicit transaction.

    Usage:
        async with get_connection() as conn:
            row = (await conn.execute(select(events))).mappings().first()
    """
    async with get_engine().connect() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncGenerator[AsyncConnection, None]:
    """Connection inside a transaction: commit on exit, rollback on error."""
    async with get_engine().begin() as conn:
        yield conn


async def close_engine() -> None:
    """Dispose of the pool. Call on shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def get_sync_database_url() -> str:
    """DATABASE_URL rewritten for psycopg2, for Alembic's synchronous migrations."""
    return _with_driver(_require_database_url(), "postgresql://")
