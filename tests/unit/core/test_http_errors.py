from __future__ import annotations

import json

import pytest

from core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    PersistenceError,
    QuotaExceededError,
    UpstreamError,
    UserNotFoundError,
    ValidationError,
)
from core.http import errors as http_errors
from core.http.errors import SANITISED_MESSAGE, format_service_error, service_error_response
from core.observability import render_payload_preview


@pytest.mark.parametrize(
    "exc, status, kind",
    [
        (ValidationError("Text is required", field="text"), 400, "validation_error"),
        (AuthenticationError(reason="token_missing"), 401, "authentication_error"),
        (ForbiddenError("Account is inactive"), 403, "forbidden"),
        (UserNotFoundError("u1"), 404, "not_found"),
        (QuotaExceededError(3, 3), 429, "quota_exceeded"),
        (UpstreamError("Speech API request failed", provider="gemini"), 500, "upstream_error"),
        (PersistenceError("Failed to store", operation="upload_audio"), 500, "persistence_error"),
    ],
)
def test_format_service_error_envelope(exc, status, kind):
    payload = format_service_error(exc)

    assert payload["code"] == status
    assert payload["success"] is False
    assert payload["data"]["error"] == kind
    assert payload["error"] == payload["message"]


def test_quota_error_carries_usage_context():
    payload = format_service_error(QuotaExceededError(3, 3))

    assert payload["message"] == "Generation limit reached (3/3)"
    assert payload["data"]["context"] == {"current": 3, "limit": 3}


def test_service_error_response_adds_bearer_challenge():
    response = service_error_response(AuthenticationError(reason="token_missing"))

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    body = json.loads(response.body)
    assert body["data"]["context"] == {"reason": "token_missing"}


def test_server_errors_are_sanitised_in_production(monkeypatch):
    monkeypatch.setattr(http_errors, "is_production", lambda: True)

    server = format_service_error(UpstreamError("key AIza... rejected by upstream"))
    client = format_service_error(ValidationError("Text is required", field="text"))

    assert server["message"] == SANITISED_MESSAGE
    assert client["message"] == "Text is required"


def test_server_errors_keep_detail_outside_production(monkeypatch):
    monkeypatch.setattr(http_errors, "is_production", lambda: False)

    assert format_service_error(UpstreamError("upstream exploded"))["message"] == "upstream exploded"


def test_payload_preview_redacts_credentials():
    body = json.dumps(
        {"email": "demo@example.com", "password": "hunter2", "adminCredential": "super-secret-admin-value"}
    ).encode("utf-8")

    preview = render_payload_preview(body)

    assert "hunter2" not in preview
    assert "super-secret-admin-value" not in preview
    assert "demo@example.com" in preview


def test_payload_preview_handles_non_json():
    assert render_payload_preview(b"") == "<empty>"
    assert render_payload_preview(None) == "<none>"
    assert render_payload_preview(b"\xff\xfe\x00") == "<binary 3 bytes>"
    assert render_payload_preview(b"plain text") == "plain text"
