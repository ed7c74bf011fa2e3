"""Database Manager — async engine with connection helpers and health checks.

Invariants:
    - Every SQLAlchemy exception leaving connection()/transaction() is mapped to
      StorageError (core/errors.py)
    - transaction() commits on success and rolls back on exception
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - SQLAlchemy Core connections, not ORM sessions: shapes are described at
      runtime, so the store builds Table objects instead of mapped classes
    - Pool sizing only for server databases; SQLite uses the dialect default pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from restcrud.core.errors import StorageError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the async engine; hands out connections with error mapping."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
        engine: AsyncEngine | None = None,
    ):
        if engine is None:
            kwargs: dict = {"pool_pre_ping": True}
            if not database_url.startswith("sqlite"):
                kwargs.update(
                    pool_size=pool_size, max_overflow=max_overflow,
                    pool_recycle=3600,
                )
            engine = create_async_engine(database_url, **kwargs)
        self.engine = engine

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """Plain connection for reads."""
        try:
            async with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            raise _to_storage_error(e, "query") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncConnection, None]:
        """Connection inside BEGIN; commits on exit, rolls back on exception."""
        try:
            async with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            raise _to_storage_error(e, "commit") from e

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.connection() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except StorageError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _to_storage_error(e: SQLAlchemyError, operation: str) -> StorageError:
    if isinstance(e, IntegrityError):
        logger.error(f"DB integrity error: {e}")
        return StorageError("Integrity constraint violated", operation)
    if isinstance(e, OperationalError):
        logger.error(f"DB operational error: {e}")
        return StorageError("Connection or operational error", operation)
    if isinstance(e, DBAPIError):
        logger.error(f"DB driver error: {e}")
        return StorageError("Database driver error", operation)
    logger.error(f"SQLAlchemy error: {e}")
    return StorageError("Database operation failed", operation)


# Singleton (initialized on startup)
db_manager: DatabaseManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseManager:
    global db_manager
    db_manager = DatabaseManager(database_url, **kwargs)
    return db_manager
