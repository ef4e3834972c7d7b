"""Voice-over Demo Backend - Main Application Entry Point

FastAPI application factory for the text-to-speech demo service.
Architecture Overview:
    - Users log in, submit text and receive synthesised audio
    - Each account has a small generation allowance tracked by the usage ledger
    - Speech is generated through Gemini, stored on S3 and logged in PostgreSQL
Entry Points:
    - /health - Health check endpoint
    - /api/v1/auth/login - Session token issue
    - /api/v1/tts/* - Generation, voice catalog and connection test
    - /api/v1/usage/me - Caller's remaining allowance
    - /api/v1/admin/* - Usage resets guarded by the administrative credential
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.tts import SEED_VOICES
from core.exceptions import ConfigurationError, ServiceError
from core.http.errors import SANITISED_MESSAGE, service_error_response
from core.logging import setup_logging
from core.observability import register_http_request_logging
from core.pydantic_schemas import error as api_error
from core.utils.env import is_production
from features.accounts.routes import router as auth_router
from features.admin.routes import router as admin_router
from features.tts import router as tts_router
from features.tts.repositories import VoiceRepository
from features.usage.routes import router as usage_router
from infrastructure.db import dispose_engine, require_main_session_factory, session_scope

# Track startup time in non-production environments
start_time = time.time() if not is_production() else None

setup_logging()

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


async def seed_voice_catalog() -> int:
    """Insert any missing catalog voices into the main database."""

    async with session_scope(require_main_session_factory()) as session:
        return await VoiceRepository(session).ensure_catalog()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events."""
    # Startup
    if SEED_VOICES:
        try:
            created = await seed_voice_catalog()
            logger.info("Voice catalog ready (%s new voice(s))", created)
        except ConfigurationError as exc:
            logger.warning("Skipping voice catalog seed: %s", exc)
    yield
    # Shutdown
    logger.info("Application shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Application factory returning a configured FastAPI instance."""

    app = FastAPI(
        title="Voiceover Demo Backend",
        description="Text-to-speech demo with per-user generation limits",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    usage_headers = ["X-Usage-Count", "X-Usage-Limit", "X-Generation-Id", "X-Storage-Path", "X-Audio-URL"]

    # Configure CORS based on environment
    if is_production():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=usage_headers,
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
            # Allow any localhost port in dev (Next/Vite/etc.)
            allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=usage_headers,
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        """Return a structured API envelope for typed service errors."""

        if exc.status_code >= 500:
            logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return service_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """Report malformed bodies as 400 instead of FastAPI's default 422."""

        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
        payload = api_error(
            code=status.HTTP_400_BAD_REQUEST,
            message=first.get("msg", "Invalid request"),
            data={"error": "validation_error", "context": {"field": field}},
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = SANITISED_MESSAGE if is_production() else str(exc) or SANITISED_MESSAGE
        payload = api_error(
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message=message,
            data={"error": "internal_error"},
        )
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": APP_VERSION}

    register_http_request_logging(app)

    app.include_router(auth_router)
    app.include_router(tts_router)
    app.include_router(usage_router)
    app.include_router(admin_router)

    timing_info = ""
    if start_time is not None:
        elapsed = time.time() - start_time
        timing_info = f" (loaded in {elapsed:.2f}s)"

    logger.info("Application created with auth, TTS, usage and admin routers%s", timing_info)
    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
