"""Pydantic schemas for the TTS feature."""

from .requests import TTSGenerateRequest
from .responses import ConnectionTestResult, VoiceInfo, VoiceListResponse

__all__ = ["ConnectionTestResult", "TTSGenerateRequest", "VoiceInfo", "VoiceListResponse"]
