"""Audio payload helpers shared by text-to-speech providers."""

from .wav import (
    WAV_HEADER_SIZE,
    WavParameters,
    encode_wav,
    is_playable_container,
    mime_to_extension,
    parse_pcm_mime_type,
    read_wav_header,
)

__all__ = [
    "WAV_HEADER_SIZE",
    "WavParameters",
    "encode_wav",
    "is_playable_container",
    "mime_to_extension",
    "parse_pcm_mime_type",
    "read_wav_header",
]
