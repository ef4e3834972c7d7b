"""Google Gemini text-to-speech provider implementation."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Iterable, Mapping

import httpx
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from config.tts import DEFAULT_MODEL, REQUEST_TIMEOUT_SECONDS
from config.tts.providers.gemini import RESPONSE_MODALITIES
from core.clients.ai import get_gemini_client
from core.exceptions import (
    EmptyResponseError,
    NetworkError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamQuotaError,
    ValidationError,
)
from core.providers.tts.utils import (
    encode_wav,
    is_playable_container,
    mime_to_extension,
    parse_pcm_mime_type,
)
from core.providers.tts_base import BaseTTSProvider, TTSRequest, TTSResult

logger = logging.getLogger(__name__)


def _inline_parts(response: Any) -> list[tuple[bytes, str]]:
    """Collect ``(data, mime_type)`` for every inline audio part in ``response``."""

    collected: list[tuple[bytes, str]] = []
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if not data:
                continue
            if isinstance(data, str):
                data = base64.b64decode(data)
            collected.append((bytes(data), getattr(inline, "mime_type", None) or ""))
    return collected


def _retry_after(exc: genai_errors.APIError) -> int | None:
    response = getattr(exc, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    value = headers.get("retry-after")
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class GeminiTTSProvider(BaseTTSProvider):
    """Adapter around Gemini's native audio generation models."""

    name = "gemini"

    def __init__(self, client: Any | None = None, *, timeout: float | None = None) -> None:
        self._client = client
        self.model = DEFAULT_MODEL
        self.timeout = timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS

    def configure(self, settings: Mapping[str, Any]) -> None:
        if not settings:
            return
        self.model = str(settings.get("model") or self.model)
        if settings.get("timeout") is not None:
            self.timeout = float(settings["timeout"])

    @property
    def client(self) -> Any:
        # Resolved lazily so a missing key surfaces as ConfigurationError per call
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def _build_config(self, request: TTSRequest) -> genai_types.GenerateContentConfig:
        return genai_types.GenerateContentConfig(
            temperature=request.temperature,
            response_modalities=list(RESPONSE_MODALITIES),
            speech_config=genai_types.SpeechConfig(
                voice_config=genai_types.VoiceConfig(
                    prebuilt_voice_config=genai_types.PrebuiltVoiceConfig(voice_name=request.voice),
                )
            ),
        )

    def _map_api_error(self, exc: genai_errors.APIError) -> UpstreamError:
        code = getattr(exc, "code", None)
        message = getattr(exc, "message", None) or str(exc)
        if code in (401, 403):
            return UpstreamAuthError(
                f"Speech API rejected the credential: {message}", provider=self.name, original_error=exc
            )
        if code == 429:
            return UpstreamQuotaError(
                f"Speech API rate limit reached: {message}",
                provider=self.name,
                original_error=exc,
                retry_after=_retry_after(exc),
            )
        return UpstreamError(f"Speech API request failed: {message}", provider=self.name, original_error=exc)

    async def generate(self, request: TTSRequest) -> TTSResult:
        client = self.client
        model = request.model or self.model
        config = self._build_config(request)

        logger.info(
            "Requesting Gemini TTS generation (model=%s voice=%s temperature=%s chars=%s)",
            model,
            request.voice,
            request.temperature,
            len(request.text),
        )

        def _invoke():
            return client.models.generate_content(
                model=model,
                contents=[genai_types.Content(role="user", parts=[genai_types.Part(text=request.text)])],
                config=config,
            )

        try:
            response = await asyncio.wait_for(asyncio.to_thread(_invoke), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Gemini TTS request timed out after %ss", self.timeout)
            raise NetworkError(
                f"Speech API did not respond within {self.timeout:g}s", provider=self.name, original_error=exc
            ) from exc
        except genai_errors.APIError as exc:
            logger.error("Gemini TTS request failed (code=%s): %s", getattr(exc, "code", None), exc)
            raise self._map_api_error(exc) from exc
        except httpx.TransportError as exc:
            logger.error("Gemini TTS transport failure: %s", exc)
            raise NetworkError("Could not reach the speech API", provider=self.name, original_error=exc) from exc

        parts = _inline_parts(response)
        if not parts:
            raise EmptyResponseError("No audio data received from the speech API", provider=self.name)

        return self._normalise(parts, model=model, voice=request.voice)

    def _normalise(self, parts: Iterable[tuple[bytes, str]], *, model: str, voice: str) -> TTSResult:
        parts = list(parts)
        first_mime = parts[0][1]

        if is_playable_container(first_mime):
            audio = b"".join(data for data, _ in parts)
            base_mime = first_mime.split(";", 1)[0].strip().lower()
            return TTSResult(
                audio_bytes=audio,
                provider=self.name,
                model=model,
                format=mime_to_extension(base_mime),
                mime_type=base_mime,
                voice=voice,
                metadata={"source_mime_type": first_mime, "parts": len(parts)},
            )

        pcm = b"".join(data for data, _ in parts)
        try:
            params = parse_pcm_mime_type(first_mime)
            audio = encode_wav(
                pcm,
                num_channels=params.num_channels,
                sample_rate=params.sample_rate,
                bits_per_sample=params.bits_per_sample,
            )
        except ValidationError as exc:
            logger.error("Unusable audio format %r from the speech API: %s", first_mime, exc.message)
            raise UpstreamError(
                "Speech API returned an unusable audio format",
                provider=self.name,
                original_error=exc,
            ) from exc
        logger.debug(
            "Wrapped %s PCM bytes from %s part(s) into WAV (rate=%s bits=%s)",
            len(pcm),
            len(parts),
            params.sample_rate,
            params.bits_per_sample,
        )
        return TTSResult(
            audio_bytes=audio,
            provider=self.name,
            model=model,
            format="wav",
            mime_type="audio/wav",
            voice=voice,
            metadata={"source_mime_type": first_mime, "parts": len(parts), "sample_rate": params.sample_rate},
        )

    async def check_connection(self) -> Mapping[str, Any]:
        """List models to prove the credential works and the TTS model exists."""

        client = self.client

        def _list_models() -> list[str]:
            return [str(getattr(model, "name", "")) for model in client.models.list()]

        try:
            names = await asyncio.wait_for(asyncio.to_thread(_list_models), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise NetworkError("Speech API did not respond", provider=self.name, original_error=exc) from exc
        except genai_errors.APIError as exc:
            raise self._map_api_error(exc) from exc
        except httpx.TransportError as exc:
            raise NetworkError("Could not reach the speech API", provider=self.name, original_error=exc) from exc

        available = any(name.rsplit("/", 1)[-1] == self.model for name in names)
        return {
            "provider": self.name,
            "ok": True,
            "model": self.model,
            "modelCount": len(names),
            "modelAvailable": available,
        }


__all__ = ["GeminiTTSProvider"]
