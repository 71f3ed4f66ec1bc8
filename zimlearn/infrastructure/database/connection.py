# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

Uses the SQLAlchemy 2.0 async API with asyncpg in production and
aiosqlite for local runs and tests. The Database object is owned by the
application container, not stored in module globals.

Example:
    database = Database(settings.database)
    await database.connect()

    async with database.session() as session:
        result = await session.execute(select(Resource))
        resources = result.scalars().all()

    await database.close()
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from zimlearn.infrastructure.database.models.base import Base

if TYPE_CHECKING:
    from zimlearn.core.config.settings import DatabaseSettings

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Base exception for database operations.

    Attributes:
        message: Human-readable error description.
        original_error: The underlying SQLAlchemy or database error.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        """Initialize the database error.

        Args:
            message: Human-readable error description.
            original_error: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


def create_engine_from_settings(settings: "DatabaseSettings") -> AsyncEngine:
    """Create an async engine with pool options suited to the backend.

    In-memory SQLite gets a StaticPool so every session sees the same
    database.

    Args:
        settings: Database settings.

    Returns:
        Configured AsyncEngine.
    """
    if settings.is_sqlite:
        options: dict = {"echo": settings.echo}
        if ":memory:" in settings.url or settings.url.rstrip("/").endswith("sqlite+aiosqlite:"):
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        return create_async_engine(settings.url, **options)

    return create_async_engine(
        settings.url,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_pre_ping=True,
        pool_recycle=1800,
        echo=settings.echo,
    )


class Database:
    """Engine and session factory for the application database.

    Attributes:
        engine: The SQLAlchemy async engine.
        sessionmaker: Session factory bound to the engine.
    """

    def __init__(
        self,
        settings: "DatabaseSettings",
        engine: Optional[AsyncEngine] = None,
    ) -> None:
        """Initialize the database wrapper.

        Args:
            settings: Database settings.
            engine: Pre-built engine, mainly for tests.

        Raises:
            DatabaseError: If the engine cannot be created.
        """
        self._settings = settings
        try:
            self.engine = engine or create_engine_from_settings(settings)
        except SQLAlchemyError as e:
            raise DatabaseError("Failed to initialize database connection", e) from e

        self.sessionmaker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def connect(
        self,
        attempts: Optional[int] = None,
        delay: Optional[float] = None,
    ) -> None:
        """Wait until the database accepts connections.

        Retries on a fixed delay.

        Args:
            attempts: Maximum attempts, defaults to the configured value.
            delay: Seconds between attempts, defaults to the configured value.

        Raises:
            DatabaseError: If the database is still unreachable after the
                last attempt.
        """
        attempts = attempts or self._settings.connect_retry_attempts
        delay = self._settings.connect_retry_delay if delay is None else delay

        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connection established")
                return
            except (SQLAlchemyError, OSError) as e:
                last_error = e
                logger.warning(
                    "Database connection attempt %d/%d failed: %s",
                    attempt,
                    attempts,
                    str(e),
                )
                if attempt < attempts:
                    await asyncio.sleep(delay)

        raise DatabaseError("Could not connect to the database", last_error)

    async def create_all(self) -> None:
        """Create all tables that do not exist yet.

        Used for SQLite and tests. PostgreSQL deployments use the Alembic
        migrations instead.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Get an async session.

        The session is committed on success and rolled back on exception.

        Yields:
            AsyncSession for database operations.

        Raises:
            DatabaseError: If a database operation fails.
        """
        async with self.sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise DatabaseError("Database operation failed", e) from e
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Check if the database is reachable.

        Returns:
            True if the database is reachable, False otherwise.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self.engine.dispose()
