"""Session management utilities."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.database.defaults import ECHO, MAX_OVERFLOW, POOL_RECYCLE, POOL_SIZE
from config.database.urls import MAIN_DB_URL
from core.exceptions import ConfigurationError, PersistenceError
from infrastructure.db import engines
from infrastructure.db.engines import create_db_engine, get_session_factory

logger = logging.getLogger(__name__)

# Lazy-loaded session factory - initialized to None
main_session_factory: Optional[async_sessionmaker] = None


@asynccontextmanager
async def session_scope(factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise PersistenceError("Database operation failed", operation="transaction") from exc
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


def get_session_dependency(factory: async_sessionmaker) -> Callable[[], AsyncIterator[AsyncSession]]:
    """Return a FastAPI dependency that yields a database session per request."""

    async def _get_session() -> AsyncIterator[AsyncSession]:
        async with session_scope(factory) as session:
            yield session

    return _get_session


def require_main_session_factory() -> async_sessionmaker:
    """Return the main session factory or raise a configuration error."""
    global main_session_factory

    if main_session_factory is None:
        if not MAIN_DB_URL:
            raise ConfigurationError(
                "MAIN_DB_URL is not configured; set it before requesting sessions",
                key="MAIN_DB_URL",
            )

        engine = create_db_engine(
            MAIN_DB_URL,
            echo=ECHO,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_recycle=POOL_RECYCLE,
            url_key="MAIN_DB_URL",
        )
        engines.main_engine = engine
        main_session_factory = get_session_factory(engine)
        logger.info("Initialised main database session factory")

    return main_session_factory


async def get_main_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session from the main database."""

    async with session_scope(require_main_session_factory()) as session:
        yield session


__all__ = [
    "get_main_session",
    "get_session_dependency",
    "require_main_session_factory",
    "session_scope",
]
