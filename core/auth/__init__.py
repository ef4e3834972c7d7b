"""Authentication helpers and dependencies."""

from .jwt import (
    AuthContext,
    AuthenticationError,
    authenticate_bearer_token,
    create_auth_token,
    require_auth_context,
)
from .passwords import hash_password, verify_password

__all__ = [
    "AuthContext",
    "AuthenticationError",
    "authenticate_bearer_token",
    "create_auth_token",
    "hash_password",
    "require_auth_context",
    "verify_password",
]
