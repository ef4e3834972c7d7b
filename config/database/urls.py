"""Database URL configuration.

The user, voice and generation tables live in one PostgreSQL database.

Environment Variables:
    - MAIN_DB_URL: Override entire URL (takes precedence)
    - DB_HOST: PostgreSQL host
    - DB_PASSWORD: PostgreSQL password
    - DB_USER: PostgreSQL username (default: postgres)
    - DB_PORT: PostgreSQL port (default: 5432)
    - DB_NAME: Database name (default: postgres)
    - DB_SCHEMA: Schema placed on the search_path (default per environment)
"""

from __future__ import annotations

import os

from config.environment import ENVIRONMENT
from core.utils.config_helpers import build_postgresql_url

DB_HOST = os.getenv("DB_HOST", "")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PORT = int(os.getenv("DB_PORT", "5432"))
DB_NAME = os.getenv("DB_NAME", "postgres")

_SCHEMAS = {
    "production": "voiceover",
    "development": "voiceover_nonprod",
    "local": "voiceover_nonprod",
    "test": "voiceover_test",
}


def _build_default_url() -> str:
    """Build the PostgreSQL URL from individual settings."""
    if not DB_HOST or not DB_PASSWORD:
        # Return empty - session factory fails later with a clear error
        return ""

    schema = os.getenv("DB_SCHEMA") or _SCHEMAS.get(ENVIRONMENT, "public")
    return build_postgresql_url(
        DB_USER,
        DB_PASSWORD,
        DB_HOST,
        DB_NAME,
        schema=schema,
        port=DB_PORT,
    )


MAIN_DB_URL = os.getenv("MAIN_DB_URL") or _build_default_url()

__all__ = [
    "DB_HOST",
    "DB_NAME",
    "DB_PORT",
    "DB_USER",
    "MAIN_DB_URL",
]
