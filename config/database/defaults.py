"""Database connection pool configuration."""

from __future__ import annotations

import os

POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "900"))
COMMAND_TIMEOUT = int(os.getenv("DB_COMMAND_TIMEOUT", "10"))
ECHO = os.getenv("DB_ECHO", "false").lower() == "true"

__all__ = [
    "POOL_SIZE",
    "MAX_OVERFLOW",
    "POOL_RECYCLE",
    "COMMAND_TIMEOUT",
    "ECHO",
]
