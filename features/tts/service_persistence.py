"""Persistence helpers for TTS service orchestration."""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ServiceError, StorageError
from core.providers.tts_base import TTSResult
from infrastructure.aws.storage import StorageService, build_voiceover_key

from .repositories import GenerationRepository
from .service_models import StoredAudio

logger = logging.getLogger(__name__)


async def store_audio(
    *,
    storage_service_factory: Callable[[], StorageService],
    result: TTSResult,
    user_id: str,
    voice_display_name: str,
) -> StoredAudio:
    """Upload ``result`` under the user's prefix; any failure is a StorageError."""

    key = build_voiceover_key(
        user_id=user_id,
        voice_display_name=voice_display_name,
        extension=result.format,
    )
    try:
        storage_service = storage_service_factory()
        url = await storage_service.upload_audio(
            audio_bytes=result.audio_bytes,
            key=key,
            content_type=result.mime_type,
        )
    except StorageError:
        raise
    except ServiceError as exc:
        raise StorageError(f"Audio storage unavailable: {exc.message}", operation="upload_audio") from exc
    return StoredAudio(key=key, url=url, size=result.size)


async def record_generation(
    session: AsyncSession,
    *,
    user_id: str,
    voice_id: int,
    text: str,
    temperature: float,
    stored: StoredAudio,
    ip_address: str | None,
    user_agent: str | None,
) -> str | None:
    """Insert and commit the generation log row; failures are logged, not raised."""

    try:
        record = await GenerationRepository(session).create(
            user_id=user_id,
            voice_id=voice_id,
            input_text=text,
            temperature=temperature,
            audio_url=stored.url,
            storage_path=stored.key,
            file_size_bytes=stored.size,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        generation_id = record.id
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Failed to record generation for user_id=%s: %s", user_id, exc, exc_info=True)
        return None

    logger.info("Recorded generation %s for user_id=%s", generation_id, user_id)
    return generation_id


__all__ = ["record_generation", "store_audio"]
