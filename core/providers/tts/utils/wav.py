"""WAV container helpers for raw PCM speech payloads.

Gemini returns speech as linear PCM described by a MIME type such as
``audio/L16;codec=pcm;rate=24000``. Browsers cannot play that directly, so
the samples are wrapped in the canonical 44 byte RIFF/WAVE header.
"""

from __future__ import annotations

import logging
import mimetypes
import re
import struct
from dataclasses import dataclass

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
DEFAULT_CHANNELS = 1
DEFAULT_SAMPLE_RATE = 24000
DEFAULT_BITS_PER_SAMPLE = 16

# RIFF size, "WAVE", fmt chunk (size 16, PCM=1, channels, rate, byte rate,
# block align, bits), data chunk size. Little-endian throughout.
_HEADER_STRUCT = struct.Struct("<4sI4s4sIHHIIHH4sI")
_PCM_FORMAT_CODE = 1
_FMT_CHUNK_SIZE = 16
_BIT_DEPTH_TOKEN = re.compile(r"^[A-Za-z]+(\d+)$")

_PLAYABLE_CONTAINERS = frozenset(
    {
        "audio/wav",
        "audio/x-wav",
        "audio/wave",
        "audio/vnd.wave",
        "audio/mpeg",
        "audio/mp3",
        "audio/ogg",
        "audio/opus",
        "audio/flac",
        "audio/webm",
        "audio/aac",
        "audio/mp4",
    }
)

_EXTENSION_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "aac": "audio/aac",
    "webm": "audio/webm",
}


@dataclass(frozen=True, slots=True)
class WavParameters:
    """Sample layout used when wrapping PCM data."""

    num_channels: int = DEFAULT_CHANNELS
    sample_rate: int = DEFAULT_SAMPLE_RATE
    bits_per_sample: int = DEFAULT_BITS_PER_SAMPLE

    @property
    def byte_rate(self) -> int:
        return self.sample_rate * self.num_channels * self.bits_per_sample // 8

    @property
    def block_align(self) -> int:
        return self.num_channels * self.bits_per_sample // 8


def _require_positive_int(value: object, field: str, *, upper: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if value <= 0 or value > upper:
        raise ValidationError(f"{field} must be between 1 and {upper}", field=field)
    return value


def encode_wav(
    pcm: bytes,
    *,
    num_channels: int = DEFAULT_CHANNELS,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    bits_per_sample: int = DEFAULT_BITS_PER_SAMPLE,
) -> bytes:
    """Return ``pcm`` prefixed with a 44 byte PCM WAV header.

    The result is always exactly ``44 + len(pcm)`` bytes. Non-integer or
    out-of-range parameters raise :class:`ValidationError`.
    """

    if not isinstance(pcm, (bytes, bytearray, memoryview)):
        raise ValidationError("PCM payload must be bytes", field="pcm")

    params = WavParameters(
        num_channels=_require_positive_int(num_channels, "num_channels", upper=0xFFFF),
        sample_rate=_require_positive_int(sample_rate, "sample_rate", upper=0xFFFFFFFF),
        bits_per_sample=_require_positive_int(bits_per_sample, "bits_per_sample", upper=0xFFFF),
    )
    if params.bits_per_sample % 8:
        raise ValidationError("bits_per_sample must be a multiple of 8", field="bits_per_sample")
    if params.byte_rate > 0xFFFFFFFF or params.block_align > 0xFFFF:
        raise ValidationError("Audio parameters overflow the WAV header", field="sample_rate")

    data = bytes(pcm)
    data_length = len(data)
    if data_length > 0xFFFFFFFF - 36:
        raise ValidationError("PCM payload too large for a WAV container", field="pcm")

    header = _HEADER_STRUCT.pack(
        b"RIFF",
        36 + data_length,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        _PCM_FORMAT_CODE,
        params.num_channels,
        params.sample_rate,
        params.byte_rate,
        params.block_align,
        params.bits_per_sample,
        b"data",
        data_length,
    )
    return header + data


def read_wav_header(payload: bytes) -> dict[str, int]:
    """Decode the canonical header written by :func:`encode_wav`."""

    if len(payload) < WAV_HEADER_SIZE:
        raise ValidationError("Payload shorter than a WAV header", field="payload")

    (riff, riff_size, wave, fmt, fmt_size, audio_format, channels, rate, byte_rate, block_align, bits, data, data_length) = (
        _HEADER_STRUCT.unpack_from(payload)
    )
    if riff != b"RIFF" or wave != b"WAVE" or fmt != b"fmt " or data != b"data":
        raise ValidationError("Payload is not a canonical WAV container", field="payload")

    return {
        "riff_size": riff_size,
        "fmt_size": fmt_size,
        "audio_format": audio_format,
        "num_channels": channels,
        "sample_rate": rate,
        "byte_rate": byte_rate,
        "block_align": block_align,
        "bits_per_sample": bits,
        "data_length": data_length,
    }


def parse_pcm_mime_type(mime_type: str | None) -> WavParameters:
    """Derive WAV parameters from a PCM MIME descriptor.

    ``audio/L16;rate=24000`` yields 16 bit samples at 24 kHz. Missing values
    fall back to mono, 24000 Hz, 16 bit.
    """

    bits_per_sample = DEFAULT_BITS_PER_SAMPLE
    sample_rate = DEFAULT_SAMPLE_RATE

    for raw_part in (mime_type or "").split(";"):
        part = raw_part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if sep:
            if key.strip().lower() == "rate":
                try:
                    sample_rate = int(value.strip())
                except ValueError as exc:
                    raise ValidationError(f"Invalid sample rate in '{mime_type}'", field="rate") from exc
            continue
        # "audio/L16" -> token "L16"
        token = part.rsplit("/", 1)[-1]
        match = _BIT_DEPTH_TOKEN.match(token)
        if match:
            bits_per_sample = int(match.group(1))

    return WavParameters(sample_rate=sample_rate, bits_per_sample=bits_per_sample)


def is_playable_container(mime_type: str | None) -> bool:
    """Return ``True`` when ``mime_type`` names a format players accept as-is."""

    base = (mime_type or "").split(";", 1)[0].strip().lower()
    if not base:
        return False
    if base in _PLAYABLE_CONTAINERS:
        return True
    if base.startswith("audio/l") or "pcm" in base:
        return False
    return mimetypes.guess_extension(base) is not None and base.startswith("audio/")


def mime_to_extension(mime_type: str) -> str:
    """Return the file extension used when storing ``mime_type`` payloads."""

    base = mime_type.split(";", 1)[0].strip().lower()
    for extension, media_type in _EXTENSION_MEDIA_TYPES.items():
        if media_type == base:
            return extension
    guessed = mimetypes.guess_extension(base)
    if guessed:
        return guessed.lstrip(".")
    logger.debug("No extension known for %s; using .bin", mime_type)
    return "bin"


__all__ = [
    "WAV_HEADER_SIZE",
    "WavParameters",
    "encode_wav",
    "is_playable_container",
    "mime_to_extension",
    "parse_pcm_mime_type",
    "read_wav_header",
]
