"""Gemini speech generation configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

DEFAULT_MODEL = os.getenv("TTS_MODEL", "gemini-2.5-pro-preview-tts")
DEFAULT_VOICE = os.getenv("TTS_DEFAULT_VOICE", "orus")
RESPONSE_MODALITIES: Tuple[str, ...] = ("AUDIO",)


@dataclass(frozen=True, slots=True)
class VoiceDefinition:
    """Prebuilt voice exposed by the Gemini speech API."""

    api_name: str
    display_name: str
    gender: str


VOICE_CATALOG: Tuple[VoiceDefinition, ...] = (
    VoiceDefinition("orus", "Orus", "male"),
    VoiceDefinition("puck", "Puck", "male"),
    VoiceDefinition("charon", "Charon", "male"),
    VoiceDefinition("fenrir", "Fenrir", "male"),
    VoiceDefinition("iapetus", "Iapetus", "male"),
    VoiceDefinition("kore", "Kore", "female"),
    VoiceDefinition("aoede", "Aoede", "female"),
    VoiceDefinition("leda", "Leda", "female"),
    VoiceDefinition("zephyr", "Zephyr", "female"),
    VoiceDefinition("callirrhoe", "Callirrhoe", "female"),
)

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_VOICE",
    "RESPONSE_MODALITIES",
    "VOICE_CATALOG",
    "VoiceDefinition",
]
