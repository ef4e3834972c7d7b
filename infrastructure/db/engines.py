"""Database engine management utilities.

PostgreSQL (asyncpg) is the production driver; SQLite (aiosqlite) URLs are
accepted for local runs and tests.
"""

from __future__ import annotations

import logging
import os
import re
import ssl
from typing import AsyncIterator, Callable, Optional
from urllib.parse import parse_qs, unquote, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from config.database.defaults import COMMAND_TIMEOUT
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

AsyncSessionFactory = async_sessionmaker[AsyncSession]
SessionDependency = Callable[[], AsyncIterator[AsyncSession]]

# Lazy-loaded engine - initialized to None
main_engine: Optional[AsyncEngine] = None


def _create_ssl_context(cert_path: str | None) -> ssl.SSLContext | None:
    """Create SSL context for PostgreSQL connection if certificate path provided."""
    if not cert_path:
        return None

    if not os.path.exists(cert_path):
        logger.warning("SSL certificate not found at %s, skipping SSL", cert_path)
        return None

    ctx = ssl.create_default_context(cafile=cert_path)
    ctx.check_hostname = True
    ctx.verify_mode = ssl.CERT_REQUIRED
    logger.info("SSL enabled with certificate: %s", cert_path)
    return ctx


def _extract_search_path_from_url(url: str) -> tuple[str, str | None]:
    """Extract search_path from PostgreSQL URL options and return clean URL.

    asyncpg doesn't accept 'options' as a URL parameter - it must be passed
    via connect_args['server_settings']['search_path'].
    """
    parsed = urlparse(url)
    if not parsed.query:
        return url, None

    query_params = parse_qs(parsed.query)
    options = query_params.get("options", [])

    schema = None
    if options:
        # "-csearch_path=voiceover" or "-csearch_path%3Dvoiceover"
        match = re.search(r"-csearch_path[=](\w+)", unquote(options[0]))
        if match:
            schema = match.group(1)

    remaining_params = {k: v for k, v in query_params.items() if k != "options"}
    new_query = "&".join(f"{k}={v[0]}" for k, v in remaining_params.items())

    clean_url = urlunparse(parsed._replace(query=new_query))
    return clean_url, schema


def create_db_engine(
    url: str,
    *,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 10,
    pool_recycle: int = 900,
    url_key: str = "MAIN_DB_URL",
) -> AsyncEngine:
    """Create an async SQLAlchemy engine for the configured database URL."""
    if not url:
        raise ConfigurationError("Database connection URL is required", key=url_key)

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)

    clean_url, schema = _extract_search_path_from_url(url)

    connect_args: dict = {"command_timeout": COMMAND_TIMEOUT}
    if schema:
        connect_args["server_settings"] = {"search_path": schema}
        logger.debug("PostgreSQL search_path set to: %s", schema)

    ssl_context = _create_ssl_context(os.environ.get("DB_SSL_CERT_PATH"))
    if ssl_context:
        connect_args["ssl"] = ssl_context

    return create_async_engine(
        clean_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        pool_pre_ping=True,
        isolation_level="READ COMMITTED",
        connect_args=connect_args,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Return an ``async_sessionmaker`` bound to ``engine``."""

    return async_sessionmaker(engine, expire_on_commit=False)


async def dispose_engine() -> None:
    """Dispose the main engine if it was initialised.

    Useful for scripts/tests to avoid event-loop shutdown warnings.
    """
    global main_engine

    if main_engine is None:
        return
    try:
        await main_engine.dispose()
    except Exception:  # pragma: no cover - best-effort cleanup
        logger.warning("Failed to dispose main engine", exc_info=True)
    finally:
        main_engine = None


__all__ = [
    "AsyncSessionFactory",
    "SessionDependency",
    "create_db_engine",
    "dispose_engine",
    "get_session_factory",
]
