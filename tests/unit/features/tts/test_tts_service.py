from __future__ import annotations

import asyncio
import re
from types import SimpleNamespace
from typing import Any, List
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from config.tts import DEFAULT_TEMPERATURE
from core.exceptions import (
    ConfigurationError,
    ForbiddenError,
    PersistenceError,
    QuotaExceededError,
    StorageError,
    UpstreamQuotaError,
    UserNotFoundError,
    ValidationError,
)
from core.providers.tts.gemini import GeminiTTSProvider
from core.providers.tts.utils import WAV_HEADER_SIZE, read_wav_header
from core.providers.tts_base import BaseTTSProvider, TTSRequest, TTSResult
from features.tts.db_models import Generation
from features.tts.schemas.requests import TTSGenerateRequest
from features.tts.service import TTSService
from features.usage.ledger import UsageLedger


class FakeProvider(BaseTTSProvider):
    name = "fake"

    def __init__(self, *, error: Exception | None = None):
        self.error = error
        self.requests: List[TTSRequest] = []

    async def generate(self, request: TTSRequest) -> TTSResult:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return TTSResult(
            audio_bytes=b"RIFF-fake-audio",
            provider=self.name,
            model="fake-model",
            format="wav",
            mime_type="audio/wav",
            voice=request.voice,
        )

    async def check_connection(self):
        return {"provider": self.name, "ok": True, "model": "fake-model", "modelCount": 3, "modelAvailable": True}


class FakeStorage:
    def __init__(self, *, error: Exception | None = None):
        self.error = error
        self.uploads: List[dict[str, Any]] = []

    async def upload_audio(self, *, audio_bytes: bytes, key: str, content_type: str = "audio/wav") -> str:
        if self.error is not None:
            raise self.error
        self.uploads.append({"audio_bytes": audio_bytes, "key": key, "content_type": content_type})
        return f"https://cdn.example.com/{key}"


class FailingGenerationRepository:
    def __init__(self, session):
        self.session = session

    async def create(self, **kwargs):
        raise OperationalError("INSERT INTO generations", {}, Exception("disk full"))


def _service(provider: BaseTTSProvider, storage: FakeStorage, *, mode: str = "strict", **kwargs) -> TTSService:
    return TTSService(
        provider_resolver=lambda settings: provider,
        storage_service_factory=lambda: storage,
        reservation_mode=mode,  # type: ignore[arg-type]
        **kwargs,
    )


def _gemini_with_pcm(pcm: bytes) -> GeminiTTSProvider:
    response = SimpleNamespace(
        candidates=[
            SimpleNamespace(
                content=SimpleNamespace(
                    parts=[
                        SimpleNamespace(
                            inline_data=SimpleNamespace(data=pcm, mime_type="audio/L16;codec=pcm;rate=24000")
                        )
                    ]
                )
            )
        ]
    )
    models = SimpleNamespace(generate_content=lambda **kwargs: response, list=lambda: [])
    return GeminiTTSProvider(client=SimpleNamespace(models=models))


async def _generations(session_factory) -> list[Generation]:
    async with session_factory() as session:
        return list((await session.execute(select(Generation))).scalars().all())


@pytest.mark.asyncio
async def test_generate_end_to_end_returns_wav_and_counts_usage(
    db_session, session_factory, make_user, make_voice, read_user
):
    await make_user(user_id="u1", current_usage=2, max_usage=3)
    voice_id = await make_voice("orus", "Orus")
    pcm = b"\x10\x00" * 200
    storage = FakeStorage()
    service = _service(_gemini_with_pcm(pcm), storage)

    result = await service.generate(
        db_session,
        user_id="u1",
        request=TTSGenerateRequest(text="Hello", voiceName="orus"),
        ip_address="203.0.113.7",
        user_agent="pytest",
    )

    assert result.mime_type == "audio/wav"
    assert len(result.audio_bytes) == WAV_HEADER_SIZE + len(pcm)
    assert read_wav_header(result.audio_bytes)["data_length"] == len(pcm)
    assert (result.usage_count, result.usage_limit) == (3, 3)
    assert re.fullmatch(r"u1/orus-\d+\.wav", result.storage_path)

    headers = result.headers()
    assert headers["X-Usage-Count"] == "3"
    assert headers["X-Usage-Limit"] == "3"
    assert headers["X-Generation-Id"] == result.generation_id

    assert storage.uploads[0]["key"] == result.storage_path
    assert storage.uploads[0]["content_type"] == "audio/wav"
    assert (await read_user("u1")).current_usage == 3

    (record,) = await _generations(session_factory)
    assert record.id == result.generation_id
    assert record.user_id == "u1"
    assert record.voice_id == voice_id
    assert record.input_text == "Hello"
    assert record.char_count == 5
    assert record.temperature == pytest.approx(DEFAULT_TEMPERATURE)
    assert record.file_size_bytes == len(result.audio_bytes)
    assert record.audio_url == f"https://cdn.example.com/{result.storage_path}"
    assert record.ip_address == "203.0.113.7"
    assert record.status == "completed"


@pytest.mark.asyncio
async def test_generate_at_limit_never_calls_provider(db_session, session_factory, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=3, max_usage=3)
    await make_voice()
    provider = MagicMock(spec=BaseTTSProvider)
    provider.generate = AsyncMock()
    storage = FakeStorage()

    with pytest.raises(QuotaExceededError) as excinfo:
        await _service(provider, storage).generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))

    assert (excinfo.value.current, excinfo.value.limit) == (3, 3)
    assert excinfo.value.status_code == 429
    provider.generate.assert_not_awaited()
    assert storage.uploads == []
    assert (await read_user("u1")).current_usage == 3
    assert await _generations(session_factory) == []


@pytest.mark.asyncio
async def test_custom_limit_overrides_plan_default(db_session, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=3, max_usage=3, custom_limit=5)
    await make_voice()

    result = await _service(FakeProvider(), FakeStorage()).generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
    )

    assert (result.usage_count, result.usage_limit) == (4, 5)
    assert (await read_user("u1")).current_usage == 4


@pytest.mark.asyncio
async def test_inactive_account_is_forbidden(db_session, make_user, make_voice):
    await make_user(user_id="u1", status="inactive")
    await make_voice()
    provider = FakeProvider()

    with pytest.raises(ForbiddenError):
        await _service(provider, FakeStorage()).generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))

    assert provider.requests == []


@pytest.mark.asyncio
async def test_unknown_user_is_not_found(db_session, make_voice):
    await make_voice()

    with pytest.raises(UserNotFoundError):
        await _service(FakeProvider(), FakeStorage()).generate(
            db_session, user_id="ghost", request=TTSGenerateRequest(text="Hi")
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "   "])
async def test_blank_text_is_rejected_first(db_session, make_user, make_voice, read_user, text):
    await make_user(user_id="u1")
    await make_voice()
    provider = FakeProvider()

    with pytest.raises(ValidationError) as excinfo:
        await _service(provider, FakeStorage()).generate(db_session, user_id="u1", request=TTSGenerateRequest(text=text))

    assert excinfo.value.field == "text"
    assert provider.requests == []
    assert (await read_user("u1")).current_usage == 0


@pytest.mark.asyncio
async def test_unknown_or_inactive_voice_is_rejected(db_session, make_user, make_voice, read_user):
    await make_user(user_id="u1")
    await make_voice("orus", "Orus")
    await make_voice("kore", "Kore", gender="female", is_active=False)
    provider = FakeProvider()
    service = _service(provider, FakeStorage())

    for voice in ("nonexistent", "kore"):
        with pytest.raises(ValidationError) as excinfo:
            await service.generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi", voiceName=voice))
        assert excinfo.value.field == "voiceName"

    assert provider.requests == []
    assert (await read_user("u1")).current_usage == 0


@pytest.mark.asyncio
async def test_default_voice_used_when_none_requested(db_session, make_user, make_voice):
    await make_user(user_id="u1")
    await make_voice("orus", "Orus")
    provider = FakeProvider()

    result = await _service(provider, FakeStorage()).generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi", voiceName="  ")
    )

    assert provider.requests[0].voice == "orus"
    assert result.voice == "orus"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "entitled, requested, expected",
    [
        (False, None, DEFAULT_TEMPERATURE),
        (False, 0.2, DEFAULT_TEMPERATURE),
        (True, None, DEFAULT_TEMPERATURE),
        (True, 0.2, 0.2),
        (True, 2.0, 2.0),
    ],
)
async def test_temperature_override_requires_entitlement(
    db_session, make_user, make_voice, entitled, requested, expected
):
    await make_user(user_id="u1", can_set_temperature=entitled)
    await make_voice()
    provider = FakeProvider()

    result = await _service(provider, FakeStorage()).generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi", temperature=requested)
    )

    assert provider.requests[0].temperature == pytest.approx(expected)
    assert result.temperature == pytest.approx(expected)


@pytest.mark.asyncio
async def test_out_of_range_temperature_rejected_for_entitled_user(db_session, make_user, make_voice, read_user):
    await make_user(user_id="u1", can_set_temperature=True)
    await make_voice()
    provider = FakeProvider()

    with pytest.raises(ValidationError) as excinfo:
        await _service(provider, FakeStorage()).generate(
            db_session, user_id="u1", request=TTSGenerateRequest(text="Hi", temperature=3.5)
        )

    assert excinfo.value.field == "temperature"
    assert provider.requests == []
    assert (await read_user("u1")).current_usage == 0


@pytest.mark.asyncio
async def test_upstream_failure_releases_claimed_slot(db_session, session_factory, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=1)
    await make_voice()
    storage = FakeStorage()
    provider = FakeProvider(error=UpstreamQuotaError("rate limited", provider="fake"))

    with pytest.raises(UpstreamQuotaError):
        await _service(provider, storage).generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))

    assert storage.uploads == []
    assert (await read_user("u1")).current_usage == 1
    assert await _generations(session_factory) == []


class StalledProvider(FakeProvider):
    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()

    async def generate(self, request: TTSRequest) -> TTSResult:
        self.requests.append(request)
        self.started.set()
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


@pytest.mark.asyncio
async def test_cancelled_generation_releases_claimed_slot(db_session, session_factory, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=1)
    await make_voice()
    provider = StalledProvider()
    storage = FakeStorage()
    task = asyncio.create_task(
        _service(provider, storage).generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))
    )

    await asyncio.wait_for(provider.started.wait(), timeout=5)
    assert (await read_user("u1")).current_usage == 2

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert storage.uploads == []
    assert (await read_user("u1")).current_usage == 1
    assert await _generations(session_factory) == []


@pytest.mark.asyncio
async def test_storage_failure_is_fatal_and_releases_slot(db_session, session_factory, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=0)
    await make_voice()
    storage = FakeStorage(error=StorageError("bucket gone", operation="upload_audio"))

    with pytest.raises(StorageError):
        await _service(FakeProvider(), storage).generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))

    assert (await read_user("u1")).current_usage == 0
    assert await _generations(session_factory) == []


@pytest.mark.asyncio
async def test_storage_misconfiguration_surfaces_as_storage_error(db_session, make_user, make_voice, read_user):
    await make_user(user_id="u1")
    await make_voice()

    def _factory():
        raise ConfigurationError("TTS_S3_BUCKET must be configured", key="TTS_S3_BUCKET")

    service = TTSService(
        provider_resolver=lambda settings: FakeProvider(),
        storage_service_factory=_factory,
        reservation_mode="strict",
    )

    with pytest.raises(StorageError):
        await service.generate(db_session, user_id="u1", request=TTSGenerateRequest(text="Hi"))

    assert (await read_user("u1")).current_usage == 0


@pytest.mark.asyncio
async def test_generation_log_failure_still_returns_audio(
    db_session, session_factory, make_user, make_voice, read_user, monkeypatch
):
    await make_user(user_id="u1", current_usage=0)
    await make_voice()
    monkeypatch.setattr("features.tts.service_persistence.GenerationRepository", FailingGenerationRepository)

    result = await _service(FakeProvider(), FakeStorage()).generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
    )

    assert result.audio_bytes == b"RIFF-fake-audio"
    assert result.generation_id is None
    assert "X-Generation-Id" not in result.headers()
    assert result.usage_count == 1
    assert (await read_user("u1")).current_usage == 1
    assert await _generations(session_factory) == []


@pytest.mark.asyncio
async def test_soft_mode_increments_after_storage(db_session, session_factory, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=2, max_usage=3)
    await make_voice()

    result = await _service(FakeProvider(), FakeStorage(), mode="soft").generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
    )

    assert (result.usage_count, result.usage_limit) == (3, 3)
    assert (await read_user("u1")).current_usage == 3
    assert len(await _generations(session_factory)) == 1


@pytest.mark.asyncio
async def test_soft_mode_failure_leaves_counter_untouched(db_session, make_user, make_voice, read_user):
    await make_user(user_id="u1", current_usage=1)
    await make_voice()
    provider = FakeProvider(error=UpstreamQuotaError("rate limited", provider="fake"))

    with pytest.raises(UpstreamQuotaError):
        await _service(provider, FakeStorage(), mode="soft").generate(
            db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
        )

    assert (await read_user("u1")).current_usage == 1


@pytest.mark.asyncio
async def test_soft_mode_increment_failure_is_best_effort(db_session, make_user, make_voice, read_user, monkeypatch):
    await make_user(user_id="u1", current_usage=1)
    await make_voice()

    async def _failing_increment(self, user_id):
        raise PersistenceError("Failed to update usage count", operation="increment")

    monkeypatch.setattr(UsageLedger, "increment", _failing_increment)

    result = await _service(FakeProvider(), FakeStorage(), mode="soft").generate(
        db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
    )

    assert result.audio_bytes == b"RIFF-fake-audio"
    assert result.usage_count == 1
    assert (await read_user("u1")).current_usage == 1


@pytest.mark.asyncio
async def test_soft_mode_at_limit_never_calls_provider(db_session, make_user, make_voice):
    await make_user(user_id="u1", current_usage=3, max_usage=3)
    await make_voice()
    provider = FakeProvider()

    with pytest.raises(QuotaExceededError):
        await _service(provider, FakeStorage(), mode="soft").generate(
            db_session, user_id="u1", request=TTSGenerateRequest(text="Hi")
        )

    assert provider.requests == []


@pytest.mark.asyncio
async def test_list_voices_returns_active_catalog(db_session, make_voice):
    await make_voice("orus", "Orus")
    await make_voice("kore", "Kore", gender="female")
    await make_voice("puck", "Puck", is_active=False)

    result = await _service(FakeProvider(), FakeStorage()).list_voices(db_session)

    assert sorted(voice.name for voice in result.voices) == ["kore", "orus"]
    assert result.default_voice == "orus"
    dumped = result.model_dump(by_alias=True)
    assert {"name", "displayName", "gender"} <= set(dumped["voices"][0])


@pytest.mark.asyncio
async def test_test_connection_requires_api_key():
    service = _service(FakeProvider(), FakeStorage(), api_key_present=lambda: False)

    with pytest.raises(ConfigurationError) as excinfo:
        await service.test_connection()

    assert excinfo.value.key == "GEMINI_API_KEY"


@pytest.mark.asyncio
async def test_test_connection_reports_provider_status():
    service = _service(FakeProvider(), FakeStorage(), api_key_present=lambda: True)

    result = await service.test_connection()

    assert result.provider == "fake"
    assert result.model_count == 3
    assert result.model_available is True
