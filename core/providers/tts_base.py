"""Base classes and schemas for text-to-speech providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping


@dataclass(slots=True)
class TTSRequest:
    """Container describing a text-to-speech generation request."""

    text: str
    voice: str
    temperature: float
    model: str | None = None
    metadata: MutableMapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TTSResult:
    """Normalised, playable audio returned by providers."""

    audio_bytes: bytes
    provider: str
    model: str
    format: str
    mime_type: str
    voice: str | None = None
    metadata: Mapping[str, Any] | None = None

    @property
    def size(self) -> int:
        return len(self.audio_bytes)


class BaseTTSProvider(ABC):
    """Base interface for text-to-speech providers."""

    name: str = "tts"

    def configure(self, settings: Mapping[str, Any]) -> None:
        """Apply provider specific configuration settings."""

    @abstractmethod
    async def generate(self, request: TTSRequest) -> TTSResult:
        """Return generated audio for the supplied text request."""

    async def check_connection(self) -> Mapping[str, Any]:
        """Return a small status payload proving the upstream is reachable."""

        return {"provider": self.name, "ok": True}


__all__ = ["TTSRequest", "TTSResult", "BaseTTSProvider"]
