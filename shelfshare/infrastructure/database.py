"""Database Session Manager — one AsyncSession per request, rolled back on any failure.

Invariants:
    - A session that exits with an exception is rolled back before the error propagates
    - ShelfShareError passes through unchanged; SQLAlchemy errors become DatabaseError
      so the client sees the standard envelope and never a driver message
    - Stores commit their own writes; the manager never commits

Design Decisions:
    - Module-level db_manager set by init_db in the FastAPI lifespan, nothing at import
    - expire_on_commit=False: stores hand back ORM rows that are read after commit
    - Pool sizing applies to server databases only; SQLite keeps SQLAlchemy's pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from shelfshare.core.errors import DatabaseError, ShelfShareError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError subclass DBAPIError
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        **engine_options,
    ):
        options: dict = {"pool_pre_ping": True, **engine_options}
        if not database_url.startswith("sqlite"):
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except ShelfShareError:
            await session.rollback()
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"{type(e).__name__} during request: {e}")
            raise to_database_error(e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 against the pool; False on any connection failure."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: a managed session for the duration of the request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
