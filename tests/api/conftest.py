"""Shared fixtures for HTTP-level tests."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from infrastructure.db import get_main_session, get_session_dependency
from main import app


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_client(session_factory) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with the main session pointed at SQLite."""

    app.dependency_overrides[get_main_session] = get_session_dependency(session_factory)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture()
def auth_headers(auth_token_factory) -> Callable[..., Dict[str, str]]:
    def _headers(user_id: str = "u1") -> Dict[str, str]:
        return {"Authorization": f"Bearer {auth_token_factory(user_id=user_id, email=f'{user_id}@example.com')}"}

    return _headers
