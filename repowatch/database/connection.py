"""Database connection management.

Provides async SQLAlchemy engine management, schema bootstrap and database
session handling for SQLite (aiosqlite) and PostgreSQL (asyncpg).
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from repowatch.config.models import DatabaseConfig
from repowatch.models import Base

logger = logging.getLogger(__name__)


class DatabaseConnectionManager:
    """Manages database connections and provides session handling.

    Handles engine creation, schema bootstrap, health checks, and provides a
    context manager for database operations with proper cleanup and error
    handling.
    """

    def __init__(self, config: DatabaseConfig | None = None):
        self.config = config or DatabaseConfig()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create async database engine."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create async session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,  # Keep objects usable after commit
            )
        return self._session_factory

    def _create_engine(self) -> AsyncEngine:
        """Create async SQLAlchemy engine for the configured dialect."""
        url = self.config.get_sqlalchemy_url()

        if self.config.is_sqlite:
            # SQLite uses a per-connection pool; pool sizing does not apply
            engine = create_async_engine(url, echo=self.config.echo)
        else:
            engine = create_async_engine(
                url,
                # Connection pool settings
                poolclass=AsyncAdaptedQueuePool,
                pool_size=self.config.pool_size,
                max_overflow=self.config.max_overflow,
                pool_pre_ping=True,
                pool_recycle=self.config.pool_recycle,
                pool_timeout=self.config.pool_timeout,
                echo=self.config.echo,
            )

        self._register_connection_events(engine)

        logger.info(
            "Created database engine",
            extra={
                "dialect": self.config.dialect,
                "pool_size": None if self.config.is_sqlite else self.config.pool_size,
            },
        )

        return engine

    def _register_connection_events(self, engine: AsyncEngine) -> None:
        """Register SQLAlchemy events for connection setup and monitoring."""
        is_sqlite = self.config.is_sqlite

        @event.listens_for(engine.sync_engine, "connect")
        def on_connect(dbapi_connection: Any, connection_record: Any) -> None:
            """Handle new database connections."""
            if is_sqlite:
                # Needed for ON DELETE CASCADE of sync state and history
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
            logger.debug("New database connection established")

        @event.listens_for(engine.sync_engine, "invalidate")
        def on_invalidate(
            dbapi_connection: Any, connection_record: Any, exception: Exception | None
        ) -> None:
            """Handle connection invalidation."""
            logger.warning(
                "Database connection invalidated",
                extra={"error": str(exception) if exception else None},
            )

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialized")

    async def drop_schema(self) -> None:
        """Drop all tables (useful for testing)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get database session with automatic cleanup.

        The session is committed when the block exits normally and rolled
        back when it raises.

        Usage:
            async with connection_manager.get_session() as session:
                result = await session.execute(query)
        """
        session = self.session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Perform database health check.

        Returns:
            bool: True if database is healthy, False otherwise
        """
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except SQLAlchemyError as e:
            logger.error("Database health check failed", extra={"error": str(e)})
            return False

    async def close(self) -> None:
        """Close database engine and clean up connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")
