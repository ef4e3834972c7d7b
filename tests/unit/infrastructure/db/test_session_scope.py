from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import PersistenceError, ValidationError
from features.accounts.db_models import User
from infrastructure.db import session_scope


@pytest.mark.asyncio
async def test_session_scope_commits_on_success(session_factory, read_user):
    async with session_scope(session_factory) as session:
        session.add(User(id="u1", email="u1@example.com"))

    user = await read_user("u1")
    assert user is not None
    assert user.current_usage == 0
    assert user.status == "active"


@pytest.mark.asyncio
async def test_session_scope_rolls_back_and_wraps_database_errors(session_factory, read_user):
    with pytest.raises(PersistenceError) as excinfo:
        async with session_scope(session_factory) as session:
            session.add(User(id="u1", email="u1@example.com"))
            await session.flush()
            await session.execute(text("SELECT * FROM no_such_table"))

    assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
    assert await read_user("u1") is None


@pytest.mark.asyncio
async def test_session_scope_reraises_service_errors(session_factory, read_user):
    with pytest.raises(ValidationError):
        async with session_scope(session_factory) as session:
            session.add(User(id="u1", email="u1@example.com"))
            await session.flush()
            raise ValidationError("bad input")

    assert await read_user("u1") is None
