"""Dependency helpers for the TTS feature."""

from __future__ import annotations

from functools import lru_cache

from .service import TTSService


@lru_cache(maxsize=1)
def _tts_service_singleton() -> TTSService:
    return TTSService()


def get_tts_service() -> TTSService:
    """Return a cached instance of :class:`TTSService`."""

    return _tts_service_singleton()


__all__ = ["get_tts_service"]
