"""Text-to-speech configuration defaults."""

from __future__ import annotations

from core.utils.env import get_bool_env, get_float_env, get_int_env

DEFAULT_PROVIDER = "gemini"
DEFAULT_TEMPERATURE = get_float_env("TTS_DEFAULT_TEMPERATURE", 1.0)
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
REQUEST_TIMEOUT_SECONDS = get_float_env("TTS_REQUEST_TIMEOUT", 120.0)
MAX_TEXT_LENGTH = get_int_env("TTS_MAX_TEXT_LENGTH", 5000)
# Insert missing catalog voices on start-up
SEED_VOICES = get_bool_env("TTS_SEED_VOICES", False)

__all__ = [
    "DEFAULT_PROVIDER",
    "DEFAULT_TEMPERATURE",
    "MAX_TEMPERATURE",
    "MAX_TEXT_LENGTH",
    "MIN_TEMPERATURE",
    "REQUEST_TIMEOUT_SECONDS",
    "SEED_VOICES",
]
