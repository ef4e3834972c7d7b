"""FastAPI routes for account login."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.pydantic_schemas import ok as api_ok
from features.accounts.schemas import LoginRequest
from features.accounts.service import AuthService
from infrastructure.db import get_main_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def get_auth_service() -> AuthService:
    """Return an AuthService instance."""
    return AuthService()


@router.post("/login")
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_main_session),
    service: AuthService = Depends(get_auth_service),
) -> dict:
    """Exchange an email/password pair for a bearer session token."""

    result = await service.login(session, email=body.email, password=body.password)
    return api_ok("Login successful", data=result.model_dump(by_alias=True))


__all__ = ["router", "get_auth_service"]
