"""Repository helpers for voices and generation records."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.tts import VOICE_CATALOG, VoiceDefinition
from features.tts.db_models import GENERATION_STATUS_COMPLETED, Generation, Voice

logger = logging.getLogger(__name__)


class VoiceRepository:
    """Read access to the voice catalog plus idempotent seeding."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_api_name(self, api_name: str) -> Voice | None:
        query = select(Voice).where(func.lower(Voice.google_api_name) == api_name.strip().lower())
        result = await self._session.execute(query)
        return result.scalars().first()

    async def get_active_by_api_name(self, api_name: str) -> Voice | None:
        voice = await self.get_by_api_name(api_name)
        if voice is None or not voice.is_active:
            return None
        return voice

    async def list_active(self) -> Sequence[Voice]:
        query = select(Voice).where(Voice.is_active.is_(True)).order_by(Voice.gender.desc(), Voice.id)
        result = await self._session.execute(query)
        return result.scalars().all()

    async def ensure_catalog(self, catalog: Iterable[VoiceDefinition] = VOICE_CATALOG) -> int:
        """Insert catalog voices that are missing; existing rows are left alone."""

        existing = set((await self._session.execute(select(Voice.google_api_name))).scalars().all())
        created = 0
        for definition in catalog:
            if definition.api_name in existing:
                continue
            self._session.add(
                Voice(
                    google_api_name=definition.api_name,
                    display_name=definition.display_name,
                    gender=definition.gender,
                    is_active=True,
                )
            )
            created += 1
        if created:
            await self._session.flush()
            logger.info("Seeded %s voice(s) into the catalog", created)
        return created


class GenerationRepository:
    """Create generation log rows."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(
        self,
        *,
        user_id: str,
        voice_id: int,
        input_text: str,
        temperature: float,
        audio_url: str | None,
        storage_path: str | None,
        file_size_bytes: int | None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Generation:
        record = Generation(
            user_id=user_id,
            voice_id=voice_id,
            input_text=input_text,
            char_count=len(input_text),
            temperature=temperature,
            audio_url=audio_url,
            storage_path=storage_path,
            file_size_bytes=file_size_bytes,
            status=GENERATION_STATUS_COMPLETED,
            ip_address=ip_address,
            user_agent=user_agent,
            completed_at=datetime.now(UTC),
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def list_for_user(self, user_id: str) -> Sequence[Generation]:
        query = select(Generation).where(Generation.user_id == user_id).order_by(Generation.created_at)
        result = await self._session.execute(query)
        return result.scalars().all()


__all__ = ["GenerationRepository", "VoiceRepository"]
