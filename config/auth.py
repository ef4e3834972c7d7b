"""Session token configuration."""

from __future__ import annotations

from core.utils.env import get_int_env

TOKEN_ALGORITHM = "HS256"
TOKEN_TTL_HOURS = get_int_env("AUTH_TOKEN_TTL_HOURS", 24)

__all__ = ["TOKEN_ALGORITHM", "TOKEN_TTL_HOURS"]
