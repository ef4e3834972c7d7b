"""Centralised JWT authentication helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Annotated, Any, Dict, TypedDict

from fastapi import Header
from jose import ExpiredSignatureError, JWTError, jwt

from config.auth import TOKEN_ALGORITHM, TOKEN_TTL_HOURS
from core.exceptions import AuthenticationError, ConfigurationError
from core.utils.env import get_env


class AuthContext(TypedDict, total=False):
    """Context extracted from a validated session token."""

    user_id: str
    email: str | None
    token: str
    payload: Dict[str, Any]


@lru_cache(maxsize=1)
def _get_secret() -> str:
    secret = get_env("MY_AUTH_TOKEN")
    if not secret:
        raise ConfigurationError("MY_AUTH_TOKEN is not configured", key="MY_AUTH_TOKEN")
    return secret


def create_auth_token(
    user_id: str,
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a session token for the given user.

    Args:
        user_id: Opaque user identifier (stored as 'id' in payload)
        email: Optional email to include in token
        expires_delta: Token validity period (default ``AUTH_TOKEN_TTL_HOURS``)

    Returns:
        Encoded JWT token string
    """
    secret = _get_secret()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=TOKEN_TTL_HOURS))
    payload: Dict[str, Any] = {
        "id": str(user_id),
        "email": email,
        "exp": expire,
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None

    parts = authorization.strip().split()
    if not parts:
        return None

    if parts[0].lower() == "bearer":
        return parts[1] if len(parts) > 1 else None

    if len(parts) == 1:
        return parts[0]

    return None


def authenticate_bearer_token(authorization: str | None) -> AuthContext:
    """Validate a bearer token sourced from the Authorization header."""

    token = _extract_bearer_token(authorization)
    if not token:
        raise AuthenticationError("Authentication required", reason="token_missing")

    secret = _get_secret()

    try:
        payload: Dict[str, Any] = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise AuthenticationError("Authentication token has expired", reason="token_expired") from exc
    except JWTError as exc:
        raise AuthenticationError("Invalid authentication token", reason="token_invalid") from exc

    user_id = payload.get("id")
    if user_id in (None, ""):
        raise AuthenticationError("Authentication token missing user id", reason="token_invalid")

    context: AuthContext = {
        "user_id": str(user_id),
        "email": payload.get("email"),
        "token": token,
        "payload": payload,
    }
    return context


def require_auth_context(
    authorization: Annotated[str | None, Header(alias="Authorization")] = None,
) -> AuthContext:
    """FastAPI dependency returning the authentication context."""

    return authenticate_bearer_token(authorization)


__all__ = [
    "AuthContext",
    "AuthenticationError",
    "authenticate_bearer_token",
    "create_auth_token",
    "require_auth_context",
]
