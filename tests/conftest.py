"""Test configuration helpers."""

from __future__ import annotations

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict

import pytest
import pytest_asyncio
from jose import jwt

# Explicitly opt-in to the async plugins we rely on, even when plugin
# auto-discovery is disabled via ``PYTEST_DISABLE_PLUGIN_AUTOLOAD``.
pytest_plugins = ("anyio", "pytest_asyncio")

# Make ``import core`` and friends work regardless of the working directory.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("MY_AUTH_TOKEN", "test-secret")
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("ADMIN_RESET_SECRET", "admin-secret")
os.environ.setdefault("BACKEND_LOG_DIR", tempfile.mkdtemp(prefix="voiceover-logs-"))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.auth.passwords import hash_password  # noqa: E402
from features.accounts.db_models import User  # noqa: E402
from features.tts.db_models import Generation, Voice  # noqa: E402,F401
from infrastructure.db import prepare_database  # noqa: E402

TEST_PASSWORD = "correct horse"


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def auth_token_secret() -> str:
    return os.environ["MY_AUTH_TOKEN"]


@pytest.fixture()
def auth_token_factory(auth_token_secret: str) -> Callable[..., str]:
    """Factory producing signed JWTs for authenticated requests."""

    def _factory(
        *,
        user_id: str = "user-1",
        email: str = "user@example.com",
        expires_delta: timedelta | None = timedelta(hours=1),
        extra_claims: Dict[str, Any] | None = None,
    ) -> str:
        payload: Dict[str, Any] = {"id": user_id, "email": email}
        if extra_claims:
            payload.update(extra_claims)
        if expires_delta is not None:
            payload["exp"] = datetime.now(timezone.utc) + expires_delta
        return jwt.encode(payload, auth_token_secret, algorithm="HS256")

    return _factory


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """In-memory SQLite database with every table created."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await prepare_database(engine)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def make_user(session_factory: async_sessionmaker[AsyncSession]) -> Callable[..., Awaitable[str]]:
    """Insert a user row and return its id."""

    async def _make_user(
        *,
        user_id: str = "user-1",
        email: str | None = None,
        current_usage: int = 0,
        max_usage: int = 3,
        custom_limit: int | None = None,
        status: str = "active",
        can_set_temperature: bool = False,
        is_demo: bool = False,
        password: str | None = TEST_PASSWORD,
    ) -> str:
        async with session_factory() as session:
            session.add(
                User(
                    id=user_id,
                    email=email or f"{user_id}@example.com",
                    password_hash=hash_password(password, rounds=4) if password else None,
                    current_usage=current_usage,
                    max_usage=max_usage,
                    custom_limit=custom_limit,
                    status=status,
                    can_set_temperature=can_set_temperature,
                    is_demo=is_demo,
                )
            )
            await session.commit()
        return user_id

    return _make_user


@pytest.fixture()
def make_voice(session_factory: async_sessionmaker[AsyncSession]) -> Callable[..., Awaitable[int]]:
    """Insert a voice row and return its id."""

    async def _make_voice(
        api_name: str = "orus",
        display_name: str = "Orus",
        *,
        gender: str = "male",
        is_active: bool = True,
    ) -> int:
        async with session_factory() as session:
            voice = Voice(google_api_name=api_name, display_name=display_name, gender=gender, is_active=is_active)
            session.add(voice)
            await session.commit()
            return voice.id

    return _make_voice


@pytest.fixture()
def read_user(session_factory: async_sessionmaker[AsyncSession]) -> Callable[[str], Awaitable[User | None]]:
    """Load a user through a fresh session so cached state cannot mask writes."""

    async def _read_user(user_id: str) -> User | None:
        async with session_factory() as session:
            return await session.get(User, user_id)

    return _read_user


@pytest.fixture()
def user_password() -> str:
    """Plain-text password stored (hashed) for users created by ``make_user``."""

    return TEST_PASSWORD
