"""Text-to-speech configuration."""

from __future__ import annotations

from .defaults import (
    DEFAULT_PROVIDER,
    DEFAULT_TEMPERATURE,
    MAX_TEMPERATURE,
    MAX_TEXT_LENGTH,
    MIN_TEMPERATURE,
    REQUEST_TIMEOUT_SECONDS,
    SEED_VOICES,
)
from .providers.gemini import DEFAULT_MODEL, DEFAULT_VOICE, VOICE_CATALOG, VoiceDefinition

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_VOICE",
    "MAX_TEMPERATURE",
    "MAX_TEXT_LENGTH",
    "MIN_TEMPERATURE",
    "REQUEST_TIMEOUT_SECONDS",
    "SEED_VOICES",
    "VOICE_CATALOG",
    "VoiceDefinition",
]
