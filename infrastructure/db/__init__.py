"""Database Infrastructure - Async SQLAlchemy engine and session management.

The users, voices and generations tables live in one PostgreSQL database
accessed through asyncpg.

FastAPI Integration Pattern:
    1. Engine created lazily on the first session request
    2. Session factory created from engine
    3. Dependency function yields scoped session per request
    4. Session auto-commits on success, auto-rolls back on error

Repository Pattern:
    - Routes call services
    - Services orchestrate providers + repositories
    - Repositories NEVER commit (services/session scope control transactions)

Usage Example:
    from infrastructure.db import get_main_session

    @router.get("/usage/me")
    async def usage(session: AsyncSession = Depends(get_main_session)):
        ...
"""

from __future__ import annotations

from .base import Base, metadata, prepare_database
from .engines import (
    AsyncSessionFactory,
    SessionDependency,
    create_db_engine,
    dispose_engine,
    get_session_factory,
)
from .sessions import (
    get_main_session,
    get_session_dependency,
    require_main_session_factory,
    session_scope,
)

__all__ = [
    "Base",
    "metadata",
    "prepare_database",
    "AsyncSessionFactory",
    "SessionDependency",
    "create_db_engine",
    "dispose_engine",
    "get_session_factory",
    "get_main_session",
    "get_session_dependency",
    "require_main_session_factory",
    "session_scope",
]
