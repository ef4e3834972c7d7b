"""FastAPI routes exposing the caller's usage allowance."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import AuthContext, require_auth_context
from core.pydantic_schemas import ok as api_ok
from features.usage.ledger import UsageLedger
from infrastructure.db import get_main_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/usage", tags=["usage"])


@router.get("/me")
async def get_my_usage(
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_main_session),
) -> dict:
    """Return current count, effective limit and remaining generations."""

    snapshot = await UsageLedger(session).get_usage(auth["user_id"])
    return api_ok("Usage retrieved", data=snapshot.as_dict())


__all__ = ["router"]
