"""Data containers shared across the text-to-speech service layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(slots=True)
class TTSGenerationResult:
    """Audio plus the bookkeeping produced by one generate request."""

    audio_bytes: bytes
    mime_type: str
    extension: str
    usage_count: int
    usage_limit: int
    voice: str
    temperature: float
    audio_url: str
    storage_path: str
    generation_id: str | None = None

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-Usage-Count": str(self.usage_count),
            "X-Usage-Limit": str(self.usage_limit),
            "X-Storage-Path": self.storage_path,
            "X-Audio-URL": self.audio_url,
            "Content-Disposition": f'inline; filename="{self.storage_path.rsplit("/", 1)[-1]}"',
        }
        if self.generation_id:
            headers["X-Generation-Id"] = self.generation_id
        return headers


@dataclass(slots=True)
class StoredAudio:
    """Location of an uploaded voice-over."""

    key: str
    url: str
    size: int


__all__ = ["StoredAudio", "TTSGenerationResult"]
