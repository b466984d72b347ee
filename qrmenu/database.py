"""
Database Connection Module
Wraps the SQLAlchemy async engine in an explicitly constructed handle.

The application factory builds one Database per process and stores it on
``app.state``; request handlers receive sessions through ``get_db``.
"""

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


# Base class for all our models
class Base(DeclarativeBase):
    pass


class Database:
    """Owns the async engine and session factory for one application."""

    def __init__(self, url: str, echo: bool = False):
        engine_kwargs = {"echo": echo}
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=5,  # Connection pool size
                max_overflow=10,  # Extra connections when pool is full
                pool_pre_ping=True,
            )

        self.url = url
        self.engine = create_async_engine(url, **engine_kwargs)

        # Session factory - creates new database sessions
        self.session_maker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Objects remain accessible after commit
        )

    async def init(self) -> None:
        """
        Create all tables in database.
        Called once at application startup.
        """
        # Register the mapped classes on Base.metadata
        import qrmenu.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency injection for FastAPI routes.
    Yields a session from the application's database handle.
    """
    database: Database = request.app.state.database
    async with database.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
