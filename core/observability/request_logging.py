"""Request logging helpers for HTTP traffic."""
from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Mapping

from fastapi import FastAPI, Request

_PAYLOAD_PREVIEW_LIMIT = 2048
# Paths to skip HTTP request logging (container probes)
_QUIET_PATHS = ("/health",)
_SENSITIVE_PAYLOAD_KEYS = {
    "admincredential",
    "authorization",
    "auth_token",
    "password",
    "secret",
    "token",
}
_TOKEN_PREVIEW_LENGTH = 6


def _redact_token(token_value: str) -> str:
    """Return a preview of sensitive values while hiding the rest."""

    if not isinstance(token_value, str) or len(token_value) <= _TOKEN_PREVIEW_LENGTH * 2:
        return "***"
    return f"{token_value[:_TOKEN_PREVIEW_LENGTH]}***"


def _format_client_address(client: tuple[str, int] | None) -> str:
    if not client:
        return "unknown"
    host, port = client
    return f"{host}:{port}" if port is not None else host


def _truncate(text: str, total_size: int) -> str:
    text = " ".join(text.split())
    if len(text) > _PAYLOAD_PREVIEW_LIMIT:
        return f"{text[:_PAYLOAD_PREVIEW_LIMIT]}... ({total_size} bytes)"
    return text


def _format_query(query: str) -> str:
    if not query:
        return "<none>"

    params = urllib.parse.parse_qs(query, keep_blank_values=True)
    redacted_params: dict[str, list[str]] = {}
    for key, values in params.items():
        if key.lower() in _SENSITIVE_PAYLOAD_KEYS:
            redacted_params[key] = [_redact_token(value) for value in values]
        else:
            redacted_params[key] = values
    return urllib.parse.urlencode(redacted_params, doseq=True)


def _redact_payload(value: Any, *, depth: int = 6) -> Any:
    if depth <= 0:
        return "<max depth reached>"

    if isinstance(value, Mapping):
        redacted: dict[Any, Any] = {}
        for key, item in value.items():
            if str(key).lower() in _SENSITIVE_PAYLOAD_KEYS:
                redacted[key] = _redact_token(str(item)) if item else "***"
            else:
                redacted[key] = _redact_payload(item, depth=depth - 1)
        return redacted

    if isinstance(value, (list, tuple)):
        return [_redact_payload(item, depth=depth - 1) for item in value]

    return value


def render_payload_preview(payload: Any) -> str:
    """Return a redacted, length-limited preview for request logging.

    Raw bodies are decoded as JSON when possible so that credential fields
    are masked before anything reaches the log handlers.
    """

    if payload is None:
        return "<none>"

    if isinstance(payload, (bytes, bytearray)):
        raw = bytes(payload)
        if not raw:
            return "<empty>"
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary {len(raw)} bytes>"
        try:
            payload = json.loads(text)
        except ValueError:
            return _truncate(text, len(raw))

    serialized = json.dumps(
        _redact_payload(payload),
        default=repr,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return _truncate(serialized, len(serialized))


def register_http_request_logging(app: FastAPI, *, logger_name: str = "core.http") -> None:
    """Attach middleware that logs every HTTP request."""

    if getattr(app.state, "_http_request_logging_installed", False):  # pragma: no cover - idempotence
        return

    logger = logging.getLogger(logger_name)

    @app.middleware("http")
    async def _log_request(request: Request, call_next):  # type: ignore[override]
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        body = await request.body()
        client = request.client
        client_addr = _format_client_address((client.host, client.port) if client else None)
        logger.info("HTTP %s %s from %s", request.method, path, client_addr)

        debug_parts: list[str] = []
        if request.url.query:
            debug_parts.append(f"query={_format_query(request.url.query)}")
        if body:
            debug_parts.append(f"body={render_payload_preview(body)}")
        if debug_parts:
            logger.debug("HTTP %s %s payload %s", request.method, path, "; ".join(debug_parts))

        response = await call_next(request)
        logger.info("HTTP %s %s -> %s", request.method, path, response.status_code)
        return response

    app.state._http_request_logging_installed = True


__all__ = ["register_http_request_logging", "render_payload_preview"]
