"""Async database engine and session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from portfolio_backend.config import Settings
from portfolio_backend.repositories.tables import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and hands out transactional sessions.

    Example:
        ```python
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.create_tables()
        async with db.session() as session:
            session.add(row)
        await db.dispose()
        ```
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        """Initialize the database.

        Args:
            url: SQLAlchemy async URL (e.g. ``sqlite+aiosqlite:///./portfolio.db``).
            echo: Log every SQL statement.
        """
        self._url = url
        self._engine = self._create_engine(url, echo)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def create(cls, settings: Settings) -> "Database":
        """Factory method to create a Database from settings."""
        return cls(settings.database_url, echo=settings.db_echo)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> AsyncEngine:
        if url.startswith("sqlite") and ":memory:" in url:
            # One shared connection, otherwise every session sees an empty database.
            return create_async_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=echo,
            )
        return create_async_engine(url, pool_pre_ping=True, echo=echo)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Transactional session: commits on success, rolls back on error."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ready")

    async def health_check(self) -> bool:
        """Check if the database answers a trivial query.

        Returns:
            True if healthy, False otherwise
        """
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()
        logger.info("Database connection closed")
