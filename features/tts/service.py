"""High-level orchestration for text-to-speech operations."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from sqlalchemy.ext.asyncio import AsyncSession

from config.api_keys import GEMINI_API_KEY
from config.tts import DEFAULT_MODEL, DEFAULT_PROVIDER, DEFAULT_VOICE
from config.usage import ReservationMode, get_reservation_mode
from core.exceptions import ConfigurationError
from core.providers import get_tts_provider
from core.providers.tts_base import BaseTTSProvider
from infrastructure.aws.storage import StorageService

from .repositories import VoiceRepository
from .schemas.requests import TTSGenerateRequest
from .schemas.responses import ConnectionTestResult, VoiceInfo, VoiceListResponse
from .service_generate import generate_voiceover
from .service_models import TTSGenerationResult

logger = logging.getLogger(__name__)


class TTSService:
    """Coordinate quota, provider calls and storage for voice-over generation."""

    def __init__(
        self,
        *,
        provider_resolver: Callable[[Dict[str, Any]], BaseTTSProvider] = get_tts_provider,
        storage_service_factory: Callable[[], StorageService] | None = None,
        reservation_mode: ReservationMode | None = None,
        api_key_present: Callable[[], bool] | None = None,
    ) -> None:
        self._provider_resolver = provider_resolver
        self._storage_service_factory = storage_service_factory or StorageService
        self._reservation_mode = reservation_mode
        self._api_key_present = api_key_present or (lambda: bool(GEMINI_API_KEY))

    @property
    def reservation_mode(self) -> ReservationMode:
        return self._reservation_mode or get_reservation_mode()

    async def generate(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        request: TTSGenerateRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> TTSGenerationResult:
        return await generate_voiceover(
            session=session,
            user_id=user_id,
            request=request,
            provider_resolver=self._provider_resolver,
            storage_service_factory=self._storage_service_factory,
            reservation_mode=self.reservation_mode,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    async def list_voices(self, session: AsyncSession) -> VoiceListResponse:
        voices = await VoiceRepository(session).list_active()
        return VoiceListResponse(
            voices=[
                VoiceInfo(name=voice.google_api_name, display_name=voice.display_name, gender=voice.gender)
                for voice in voices
            ],
            default_voice=DEFAULT_VOICE,
        )

    async def test_connection(self) -> ConnectionTestResult:
        if not self._api_key_present():
            raise ConfigurationError("GEMINI_API_KEY is not configured", key="GEMINI_API_KEY")

        provider = self._provider_resolver({"tts": {"provider": DEFAULT_PROVIDER}})
        logger.info("Testing speech API connection via %s", provider.__class__.__name__)
        status = await provider.check_connection()
        return ConnectionTestResult(
            provider=str(status.get("provider", provider.name)),
            api_key_configured=True,
            model=str(status.get("model", DEFAULT_MODEL)),
            model_count=int(status.get("modelCount", 0)),
            model_available=bool(status.get("modelAvailable", False)),
        )


__all__ = ["TTSService", "TTSGenerationResult"]
