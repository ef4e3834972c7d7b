"""Response payloads for the TTS feature."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class VoiceInfo(BaseModel):
    """Catalog entry exposed to the voice picker."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    name: str = Field(..., description="Identifier passed back as voiceName")
    display_name: str = Field(..., alias="displayName")
    gender: str | None = None


class VoiceListResponse(BaseModel):
    voices: List[VoiceInfo]
    default_voice: str = Field(..., alias="defaultVoice")

    model_config = ConfigDict(populate_by_name=True)


class ConnectionTestResult(BaseModel):
    """Outcome of probing the speech API with the configured credential."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    provider: str
    api_key_configured: bool = Field(..., alias="apiKeyConfigured")
    model: str
    model_count: int = Field(..., alias="modelCount")
    model_available: bool = Field(..., alias="modelAvailable")


__all__ = ["ConnectionTestResult", "VoiceInfo", "VoiceListResponse"]
