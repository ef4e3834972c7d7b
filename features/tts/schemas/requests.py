"""Pydantic request models for the TTS feature."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TTSGenerateRequest(BaseModel):
    """Body of ``POST /api/v1/tts/generate``.

    Only presence and type are checked here. Length limits, voice lookup and
    temperature entitlement are enforced by the service so that every
    rejection carries the same error envelope.
    """

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(default=None, description="Text to synthesise into speech")
    voice_name: Optional[str] = Field(
        default=None,
        alias="voiceName",
        description="Voice identifier from the catalog; defaults to the configured voice",
    )
    temperature: Optional[float] = Field(
        default=None,
        description="Creativity parameter; honoured only for entitled accounts",
    )

    @field_validator("voice_name", mode="before")
    @classmethod
    def _blank_voice_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


__all__ = ["TTSGenerateRequest"]
