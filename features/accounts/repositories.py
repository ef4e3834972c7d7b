"""Repository helpers for user accounts."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import verify_password
from core.exceptions import AuthenticationError
from features.accounts.db_models import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Lookup and authentication helpers for :class:`User` rows."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        query = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self._session.execute(query)
        return result.scalars().first()

    async def verify_credentials(self, *, email: str, password: str) -> User:
        """Return the user when credentials are valid; raise otherwise."""

        logger.info("Authenticating user for email=%s", email)
        user = await self.get_by_email(email)
        if user is None:
            logger.warning("Authentication failed: user not found (email=%s)", email)
            raise AuthenticationError("Invalid email or password", reason="invalid_credentials")

        if not user.password_hash:
            logger.error("Authentication failed: missing password hash (email=%s)", email)
            raise AuthenticationError("Invalid email or password", reason="invalid_credentials")

        if not verify_password(password, user.password_hash):
            logger.warning("Authentication failed: invalid credentials (email=%s)", email)
            raise AuthenticationError("Invalid email or password", reason="invalid_credentials")

        logger.info("Authentication succeeded for user_id=%s", user.id)
        return user


__all__ = ["UserRepository"]
