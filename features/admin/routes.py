"""Administrative endpoints for resetting demo usage counters."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config.usage import get_admin_reset_secret
from core.exceptions import AuthenticationError, ConfigurationError
from core.pydantic_schemas import ok as api_ok
from features.admin.schemas import ResetDemoUsersRequest, ResetUsageRequest
from features.usage.ledger import UsageLedger
from infrastructure.db import get_main_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


def verify_admin_credential(candidate: str | None) -> None:
    """Raise unless ``candidate`` matches ``ADMIN_RESET_SECRET``."""

    secret = get_admin_reset_secret()
    if not secret:
        raise ConfigurationError("ADMIN_RESET_SECRET is not configured", key="ADMIN_RESET_SECRET")
    if not candidate or not hmac.compare_digest(candidate.encode("utf-8"), secret.encode("utf-8")):
        logger.warning("Rejected administrative request with invalid credential")
        raise AuthenticationError("Invalid administrative credential", reason="invalid_admin_credential")


@router.post("/reset-usage")
async def reset_usage(
    body: ResetUsageRequest,
    session: AsyncSession = Depends(get_main_session),
) -> dict:
    """Reset one user's counter, or every user's when ``userId`` is omitted."""

    verify_admin_credential(body.admin_credential)
    ledger = UsageLedger(session)

    if body.user_id:
        count = await ledger.reset_one(body.user_id)
        message = f"Usage reset for user {body.user_id}"
    else:
        count = await ledger.reset_all()
        message = f"Usage reset for {count} users"

    return api_ok(message, data={"resetCount": count, "userId": body.user_id})


@router.post("/reset-demo-users")
async def reset_demo_users(
    body: ResetDemoUsersRequest,
    session: AsyncSession = Depends(get_main_session),
) -> dict:
    """Zero usage and reactivate every demo account."""

    verify_admin_credential(body.admin_credential)
    count = await UsageLedger(session).reset_demo_users()
    return api_ok(f"Reset {count} demo users", data={"resetCount": count})


__all__ = ["router", "verify_admin_credential"]
