"""Service objects for interacting with S3 object storage."""

from __future__ import annotations

import asyncio
import logging
import re
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError

from config.aws import AWS_REGION, TTS_PUBLIC_BASE_URL, TTS_S3_BUCKET
from core.exceptions import ConfigurationError, StorageError

from .clients import get_s3_client

logger = logging.getLogger(__name__)

_SLUG_WHITESPACE = re.compile(r"\s+")
_SLUG_UNSAFE = re.compile(r"[^a-z0-9._-]")


def slugify(value: str) -> str:
    """Lowercase ``value`` and hyphenate whitespace for use in object keys."""

    slug = _SLUG_WHITESPACE.sub("-", (value or "").strip().lower())
    slug = _SLUG_UNSAFE.sub("", slug)
    return slug or "audio"


def build_voiceover_key(
    *,
    user_id: str,
    voice_display_name: str,
    extension: str = "wav",
    now: datetime | None = None,
) -> str:
    """Return ``{user_id}/{voice-slug}-{epoch_millis}.{extension}``."""

    moment = now or datetime.now(UTC)
    epoch_millis = int(moment.timestamp() * 1000)
    return f"{user_id}/{slugify(voice_display_name)}-{epoch_millis}.{extension}"


class StorageService:
    """Handle uploads of generated voice-overs to S3."""

    def __init__(self, *, bucket_name: str | None = None, s3_client: Any | None = None) -> None:
        client = s3_client or get_s3_client()
        if client is None:
            raise ConfigurationError("S3 client not initialised", key="AWS credentials")

        self._s3_client = client
        resolved_bucket = bucket_name or TTS_S3_BUCKET
        if not resolved_bucket:
            raise ConfigurationError("TTS_S3_BUCKET must be configured", key="TTS_S3_BUCKET")
        self._bucket_name = resolved_bucket
        self._region = AWS_REGION or ""

        logger.debug("StorageService initialised", extra={"bucket": self._bucket_name})

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    async def upload_audio(
        self,
        *,
        audio_bytes: bytes,
        key: str,
        content_type: str = "audio/wav",
    ) -> str:
        """Upload generated audio bytes to S3 and return the public URL."""

        if not audio_bytes:
            raise StorageError("Cannot upload empty audio payload", operation="upload_audio")

        logger.info(
            "Uploading generated audio to S3 bucket=%s key=%s bytes=%s",
            self._bucket_name,
            key,
            len(audio_bytes),
        )

        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket_name,
                Key=key,
                Body=audio_bytes,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for key=%s: %s", key, exc)
            raise StorageError("Failed to store generated audio", operation="upload_audio") from exc

        url = self._object_url(key)
        logger.info("Audio uploaded successfully to %s", url)
        return url

    def _object_url(self, key: str) -> str:
        """Return the public URL for ``key``."""

        quoted = quote(key, safe="/")
        if TTS_PUBLIC_BASE_URL:
            return f"{TTS_PUBLIC_BASE_URL.rstrip('/')}/{quoted}"
        if self._region:
            return f"https://{self._bucket_name}.s3.{self._region}.amazonaws.com/{quoted}"
        return f"https://{self._bucket_name}.s3.amazonaws.com/{quoted}"


__all__ = ["StorageService", "build_voiceover_key", "slugify"]
