"""REST routes exposing text-to-speech functionality."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import AuthContext, require_auth_context
from core.exceptions import ConfigurationError, ServiceError, UpstreamAuthError
from core.http.errors import service_error_response
from core.pydantic_schemas import error as api_error, ok as api_ok
from features.tts.dependencies import get_tts_service
from features.tts.schemas.requests import TTSGenerateRequest
from features.tts.service import TTSService
from features.tts.utils import resolve_client_ip
from infrastructure.db import get_main_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tts", tags=["TTS"])


@router.post(
    "/generate",
    summary="Generate a voice-over from text",
    response_class=Response,
    responses={200: {"content": {"audio/wav": {}}}},
)
async def generate_tts_endpoint(
    body: TTSGenerateRequest,
    request: Request,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_main_session),
    service: TTSService = Depends(get_tts_service),
) -> Response:
    """Return synthesised audio bytes with usage headers."""

    try:
        result = await service.generate(
            session,
            user_id=auth["user_id"],
            request=body,
            ip_address=resolve_client_ip(request.headers, request.client.host if request.client else None),
            user_agent=request.headers.get("user-agent"),
        )
    except ServiceError as exc:
        log = logger.warning if exc.status_code < 500 else logger.error
        log("TTS generation failed for user_id=%s: %s", auth["user_id"], exc)
        return service_error_response(exc)

    return Response(content=result.audio_bytes, media_type=result.mime_type, headers=result.headers())


@router.get("/voices", summary="List available voices")
async def list_voices_endpoint(
    session: AsyncSession = Depends(get_main_session),
    service: TTSService = Depends(get_tts_service),
) -> dict:
    result = await service.list_voices(session)
    return api_ok("Voices retrieved", data=result.model_dump(by_alias=True))


@router.get("/connection-test", summary="Check the speech API credential")
async def connection_test_endpoint(service: TTSService = Depends(get_tts_service)) -> JSONResponse:
    """Report whether the configured key works and the TTS model is listed."""

    try:
        result = await service.test_connection()
    except ConfigurationError as exc:
        logger.warning("Speech API connection test: %s", exc)
        payload = api_error(code=status.HTTP_400_BAD_REQUEST, message=exc.message, data={"apiKeyConfigured": False})
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)
    except UpstreamAuthError as exc:
        logger.error("Speech API rejected the configured key: %s", exc)
        payload = api_error(
            code=status.HTTP_401_UNAUTHORIZED,
            message="Speech API rejected the configured key",
            data={"apiKeyConfigured": True},
        )
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=payload)
    except ServiceError as exc:
        logger.error("Speech API connection test failed: %s", exc)
        return service_error_response(exc)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=api_ok("Speech API reachable", data=result.model_dump(by_alias=True)),
    )


__all__ = ["router"]
