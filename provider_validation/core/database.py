"""Database store handle.

The ``DatabaseClient`` owns the async engine and its connection pool. It is
constructed explicitly (in the FastAPI lifespan, or by tests) and passed into
the services; nothing in the core reads a module-level connection.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from provider_validation.core.config import DatabaseSettings
from provider_validation.core.exceptions import StoreFailure
from provider_validation.utils.logging import get_logger

LOGGER = get_logger(__name__)

# query_canceled (statement_timeout) and lock_not_available (lock_timeout)
TIMEOUT_SQLSTATES = frozenset({"57014", "55P03"})


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def is_timeout_error(error: SQLAlchemyError) -> bool:
    """Return True when a driver error was raised by a transaction bound."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    return sqlstate in TIMEOUT_SQLSTATES


class DatabaseClient:
    """PostgreSQL store handle with pool, transaction and migration management."""

    def __init__(self, db_settings: DatabaseSettings, engine: Optional[AsyncEngine] = None):
        """Initialize database client.

        Args:
            db_settings: Connection, pool and timeout settings
            engine: Optional pre-built engine (tests pass their own)
        """
        self.settings = db_settings
        self.engine = engine or create_async_engine(
            db_settings.connection_url,
            pool_size=db_settings.pool_size,
            max_overflow=db_settings.max_overflow,
            echo=db_settings.echo,
            pool_pre_ping=True,
            # Disable prepared statement cache for PgBouncer compatibility
            connect_args={"statement_cache_size": 0},
        )
        self.session_maker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        self._connected = False

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Open one bounded transaction.

        Commits when the block exits normally and rolls back on any exception.
        Driver and pool errors are re-raised as ``StoreFailure``; every other
        exception propagates unchanged after the rollback.

        Yields:
            AsyncSession: Session bound to the open transaction
        """
        async with self.session_maker() as session:
            try:
                async with session.begin():
                    await session.execute(
                        text(f"SET LOCAL statement_timeout = {int(self.settings.statement_timeout_ms)}")
                    )
                    await session.execute(
                        text(f"SET LOCAL lock_timeout = {int(self.settings.lock_timeout_ms)}")
                    )
                    yield session
            except SQLAlchemyError as e:
                if is_timeout_error(e):
                    LOGGER.warning("Transaction timed out", extra={"error": str(e)})
                    raise StoreFailure("Database transaction timed out", original_error=e) from e
                LOGGER.error("Database transaction failed", exc_info=True)
                raise StoreFailure(f"Database transaction failed: {e}", original_error=e) from e

    async def connect(self) -> bool:
        """Test database connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            self._connected = True
            LOGGER.info("Database connection successful")
            return True

        except SQLAlchemyError:
            self._connected = False
            LOGGER.error("Database connection failed", exc_info=True)
            raise

    async def disconnect(self) -> None:
        """Dispose of the connection pool."""
        await self.engine.dispose()
        self._connected = False
        LOGGER.info("Database connection closed")

    async def create_tables(self) -> None:
        """Create all database tables from SQLAlchemy models.

        This will create tables that don't exist without dropping existing ones.
        """
        # Register the models on Base.metadata
        from provider_validation.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        LOGGER.info("Database tables created/verified successfully")

    async def drop_tables(self) -> None:
        """Drop all database tables.

        WARNING: This will delete all data!
        """
        from provider_validation.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        LOGGER.warning("All database tables dropped")

    async def auto_migrate(self, drop_existing: bool = False) -> None:
        """Create missing tables; Alembic remains the source of truth in production.

        Args:
            drop_existing: If True, drop existing tables before creating (WARNING: data loss!)
        """
        LOGGER.info("Starting auto-migration", extra={"drop_existing": drop_existing})

        if drop_existing:
            await self.drop_tables()
        await self.create_tables()

        LOGGER.info("Auto-migration completed successfully")

    async def health_check(self) -> dict:
        """Check database health."""
        try:
            async with self.engine.connect() as conn:
                val = await conn.scalar(text("SELECT 1"))

            self._connected = True
            return {
                "status": "healthy",
                "connected": True,
                "database": "postgresql",
                "latency_test": "passed" if val == 1 else "failed",
            }

        except (SQLAlchemyError, OSError) as e:
            self._connected = False
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
            }

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._connected


def get_db_client(request: Request) -> DatabaseClient:
    """FastAPI dependency returning the store handle built in the lifespan."""
    return request.app.state.db_client

