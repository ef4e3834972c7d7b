from __future__ import annotations

import pytest

from config.tts import DEFAULT_TEMPERATURE
from core.exceptions import ValidationError
from features.tts.service_models import TTSGenerationResult
from features.tts.utils import normalise_text, resolve_client_ip, resolve_temperature


def test_normalise_text_strips_whitespace():
    assert normalise_text("  Hello there \n") == "Hello there"


@pytest.mark.parametrize("value", [None, "", " \t\n", 42])
def test_normalise_text_requires_text(value):
    with pytest.raises(ValidationError) as excinfo:
        normalise_text(value)

    assert excinfo.value.message == "Text is required"
    assert excinfo.value.field == "text"


def test_normalise_text_enforces_max_length():
    assert normalise_text("a" * 10, max_length=10) == "a" * 10
    with pytest.raises(ValidationError):
        normalise_text("a" * 11, max_length=10)


def test_resolve_temperature_ignores_override_without_entitlement():
    assert resolve_temperature(0.3, entitled=False) == DEFAULT_TEMPERATURE
    assert resolve_temperature(99.0, entitled=False) == DEFAULT_TEMPERATURE


def test_resolve_temperature_honours_entitled_override():
    assert resolve_temperature(0.0, entitled=True) == 0.0
    assert resolve_temperature(None, entitled=True) == DEFAULT_TEMPERATURE


@pytest.mark.parametrize("value", [-0.1, 2.01])
def test_resolve_temperature_range_check(value):
    with pytest.raises(ValidationError) as excinfo:
        resolve_temperature(value, entitled=True)

    assert excinfo.value.field == "temperature"


def test_resolve_client_ip_prefers_forwarded_header():
    headers = {"x-forwarded-for": "198.51.100.1, 10.0.0.1", "x-real-ip": "10.0.0.2"}

    assert resolve_client_ip(headers, "127.0.0.1") == "198.51.100.1"
    assert resolve_client_ip({"x-real-ip": "10.0.0.2"}, "127.0.0.1") == "10.0.0.2"
    assert resolve_client_ip({}, "127.0.0.1") == "127.0.0.1"
    assert resolve_client_ip({}, None) is None


def test_generation_result_headers():
    result = TTSGenerationResult(
        audio_bytes=b"wav",
        mime_type="audio/wav",
        extension="wav",
        usage_count=2,
        usage_limit=3,
        voice="orus",
        temperature=1.0,
        audio_url="https://cdn.example.com/u1/orus-1.wav",
        storage_path="u1/orus-1.wav",
    )

    assert result.headers() == {
        "X-Usage-Count": "2",
        "X-Usage-Limit": "3",
        "X-Storage-Path": "u1/orus-1.wav",
        "X-Audio-URL": "https://cdn.example.com/u1/orus-1.wav",
        "Content-Disposition": 'inline; filename="orus-1.wav"',
    }
