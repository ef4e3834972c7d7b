"""Login flow: credential check, account status gate and token issue."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.auth import TOKEN_TTL_HOURS
from core.auth import create_auth_token
from core.exceptions import ForbiddenError, ValidationError
from features.accounts.repositories import UserRepository
from features.accounts.schemas import LoginResponse, LoginUser, UsageSummary

logger = logging.getLogger(__name__)


class AuthService:
    """Issue session tokens for demo accounts."""

    def __init__(self, *, token_ttl_hours: int = TOKEN_TTL_HOURS) -> None:
        self._ttl = timedelta(hours=token_ttl_hours)

    async def login(self, session: AsyncSession, *, email: str | None, password: str | None) -> LoginResponse:
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required", field="email" if not email else "password")

        user = await UserRepository(session).verify_credentials(email=email, password=password)
        if not user.is_active:
            logger.warning("Login refused for inactive account user_id=%s", user.id)
            raise ForbiddenError("Account is inactive")

        token = create_auth_token(user.id, email=user.email, expires_delta=self._ttl)
        return LoginResponse(
            token=token,
            user=LoginUser(
                id=user.id,
                email=user.email,
                usage=UsageSummary(used=user.current_usage, max=user.effective_limit),
            ),
            expires_in=int(self._ttl.total_seconds()),
        )


__all__ = ["AuthService"]
