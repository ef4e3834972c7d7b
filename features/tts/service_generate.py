"""End-to-end handling of one voice-over generation request.

Gate order: text, account, quota, voice, temperature. Every gate runs before
the speech API is called, so a rejected request has no side effects.

In ``strict`` reservation mode the usage slot is claimed and committed
before generation and released again if generation or the upload fails.
In ``soft`` mode the counter is only checked up front and incremented after
the audio has been stored. Logging the generation row and the soft-mode
increment are best effort: their failures are logged and the caller still
receives the audio.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.tts import DEFAULT_PROVIDER, DEFAULT_VOICE
from config.usage import ReservationMode
from core.exceptions import (
    ForbiddenError,
    PersistenceError,
    QuotaExceededError,
    UserNotFoundError,
    ValidationError,
)
from core.providers.tts_base import BaseTTSProvider, TTSRequest
from features.accounts.repositories import UserRepository
from features.tts.repositories import VoiceRepository
from features.tts.schemas.requests import TTSGenerateRequest
from features.usage.ledger import UsageLedger, UsageSnapshot
from infrastructure.aws.storage import StorageService

from .service_models import TTSGenerationResult
from .service_persistence import record_generation, store_audio
from .utils import normalise_text, resolve_temperature

logger = logging.getLogger(__name__)


def _ensure_can_generate(snapshot: UsageSnapshot) -> None:
    if not snapshot.is_active:
        logger.warning("Generation refused for inactive account user_id=%s", snapshot.user_id)
        raise ForbiddenError("Account is inactive")
    if snapshot.limit_reached:
        logger.warning(
            "Generation refused for user_id=%s: limit reached (%s/%s)",
            snapshot.user_id,
            snapshot.current,
            snapshot.effective_limit,
        )
        raise QuotaExceededError(snapshot.current, snapshot.effective_limit)


async def _release_claim(session: AsyncSession, ledger: UsageLedger, user_id: str) -> None:
    """Give back a claimed slot; failures are logged because the request already failed."""

    try:
        await ledger.release(user_id)
        await session.commit()
    except (PersistenceError, SQLAlchemyError):
        await session.rollback()
        logger.error("Failed to release usage claim for user_id=%s", user_id, exc_info=True)


async def generate_voiceover(
    *,
    session: AsyncSession,
    user_id: str,
    request: TTSGenerateRequest,
    provider_resolver: Callable[[Dict[str, Any]], BaseTTSProvider],
    storage_service_factory: Callable[[], StorageService],
    reservation_mode: ReservationMode,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> TTSGenerationResult:
    text = normalise_text(request.text)

    ledger = UsageLedger(session)
    snapshot = await ledger.get_usage(user_id)
    _ensure_can_generate(snapshot)

    voice_name = request.voice_name or DEFAULT_VOICE
    voice = await VoiceRepository(session).get_active_by_api_name(voice_name)
    if voice is None:
        logger.warning("Generation refused for user_id=%s: unknown or inactive voice %s", user_id, voice_name)
        raise ValidationError(f"Unknown or inactive voice '{voice_name}'", field="voiceName")

    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    temperature = resolve_temperature(request.temperature, entitled=user.can_set_temperature)

    # Plain values only from here on: a rollback expires ORM instances.
    voice_id = voice.id
    voice_api_name = voice.google_api_name
    voice_display_name = voice.display_name
    usage_limit = snapshot.effective_limit
    usage_count = snapshot.current

    provider = provider_resolver({"tts": {"provider": DEFAULT_PROVIDER}})

    if reservation_mode == "strict":
        claimed = await ledger.claim(user_id)
        if claimed is None:
            await session.rollback()
            _ensure_can_generate(await ledger.get_usage(user_id))
            raise QuotaExceededError(usage_limit, usage_limit)
        await session.commit()
        usage_count = claimed
    elif not await ledger.try_reserve(user_id):
        raise QuotaExceededError(usage_count, usage_limit)

    logger.info(
        "Generating voice-over for user_id=%s voice=%s temperature=%s chars=%s mode=%s",
        user_id,
        voice_api_name,
        temperature,
        len(text),
        reservation_mode,
    )

    try:
        result = await provider.generate(TTSRequest(text=text, voice=voice_api_name, temperature=temperature))
        stored = await store_audio(
            storage_service_factory=storage_service_factory,
            result=result,
            user_id=user_id,
            voice_display_name=voice_display_name,
        )
    except (Exception, asyncio.CancelledError):
        if reservation_mode == "strict":
            await _release_claim(session, ledger, user_id)
        raise

    generation_id = await record_generation(
        session,
        user_id=user_id,
        voice_id=voice_id,
        text=text,
        temperature=temperature,
        stored=stored,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    if reservation_mode == "soft":
        try:
            usage_count = await ledger.increment(user_id)
            await session.commit()
        except (PersistenceError, UserNotFoundError, SQLAlchemyError):
            await session.rollback()
            logger.error("Failed to increment usage for user_id=%s", user_id, exc_info=True)

    logger.info(
        "Voice-over ready for user_id=%s (%s bytes, usage %s/%s)",
        user_id,
        stored.size,
        usage_count,
        usage_limit,
    )
    return TTSGenerationResult(
        audio_bytes=result.audio_bytes,
        mime_type=result.mime_type,
        extension=result.format,
        usage_count=usage_count,
        usage_limit=usage_limit,
        voice=voice_api_name,
        temperature=temperature,
        audio_url=stored.url,
        storage_path=stored.key,
        generation_id=generation_id,
    )


__all__ = ["generate_voiceover"]
