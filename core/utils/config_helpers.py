"""Helper utilities for configuration modules."""

from __future__ import annotations

from urllib.parse import quote_plus


def build_postgresql_url(
    user: str,
    password: str | None,
    host: str,
    database: str,
    *,
    schema: str | None = None,
    port: int | None = 5432,
) -> str:
    """Build an asyncpg connection string.

    Args:
        user: Database username
        password: Database password (can be None for trust auth)
        host: Database host (can include port as host:port)
        database: Database name
        schema: Schema to set as search_path (optional)
        port: Database port, ignored when ``host`` already carries one

    Returns:
        Async SQLAlchemy connection URL
    """
    credentials = f"{user}:{quote_plus(password)}" if password else user

    if port and ":" not in host:
        host_with_port = f"{host}:{port}"
    else:
        host_with_port = host

    url = f"postgresql+asyncpg://{credentials}@{host_with_port}/{database}"

    if schema:
        url += f"?options=-csearch_path%3D{schema}"

    return url


__all__ = ["build_postgresql_url"]
