"""Database client with async SQLAlchemy.

A ``Database`` is constructed once at application start and stored on
``app.state``; request handlers reach it through ``get_db_session``.
"""
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from exam_prep.core.config import Settings
from exam_prep.core.logging import get_logger
from exam_prep.db.base import Base

logger = get_logger(__name__)


def _ensure_sqlite_directory(url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        parent = os.path.dirname(parsed.database)
        if parent:
            os.makedirs(parent, exist_ok=True)


class Database:
    """Owns the engine and session factory for one process."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        _ensure_sqlite_directory(url)
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.db_echo)

    async def create_all(self) -> None:
        """Create missing tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db_tables_created")

    async def ping(self) -> None:
        """Verify connectivity."""
        async with self.engine.begin() as conn:
            result = await conn.execute(text("SELECT 1"))
            logger.info("db_connection_verified", result=result.scalar())

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
        logger.info("db_connections_closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session, rolling back on error."""
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for a database session."""
    database: Database = request.app.state.db
    async with database.session() as session:
        yield session
