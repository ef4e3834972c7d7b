"""Utilities for formatting structured HTTP error responses."""

from __future__ import annotations

from typing import Any, Dict

from fastapi.responses import JSONResponse

from core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    PersistenceError,
    QuotaExceededError,
    ServiceError,
    UpstreamError,
    ValidationError,
)
from core.pydantic_schemas import error as api_error
from core.utils.env import is_production

SANITISED_MESSAGE = "Internal Server Error"


def _error_kind(exc: ServiceError) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, AuthenticationError):
        return "authentication_error"
    if isinstance(exc, QuotaExceededError):
        return "quota_exceeded"
    if isinstance(exc, NotFoundError):
        return "not_found"
    if isinstance(exc, ConfigurationError):
        return "configuration_error"
    if isinstance(exc, UpstreamError):
        return "upstream_error"
    if isinstance(exc, PersistenceError):
        return "persistence_error"
    if exc.status_code == 403:
        return "forbidden"
    return "service_error"


def _error_context(exc: ServiceError) -> Dict[str, Any] | None:
    if isinstance(exc, ValidationError) and exc.field:
        return {"field": exc.field}
    if isinstance(exc, AuthenticationError) and exc.reason:
        return {"reason": exc.reason}
    if isinstance(exc, QuotaExceededError):
        return {"current": exc.current, "limit": exc.limit}
    if isinstance(exc, NotFoundError) and exc.resource:
        return {"resource": exc.resource}
    return None


def public_message(exc: ServiceError) -> str:
    """Return the message safe to show to clients for ``exc``.

    Server-side failures only expose their detail outside production.
    """

    if exc.status_code >= 500 and is_production():
        return SANITISED_MESSAGE
    return exc.message


def format_service_error(exc: ServiceError) -> Dict[str, Any]:
    """Return the envelope payload for any :class:`ServiceError`."""

    data: Dict[str, Any] = {"error": _error_kind(exc)}
    context = _error_context(exc)
    if context:
        data["context"] = context
    return api_error(code=exc.status_code, message=public_message(exc), data=data)


def service_error_response(exc: ServiceError) -> JSONResponse:
    """Translate ``exc`` into a JSON response carrying its status code."""

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=format_service_error(exc), headers=headers)


__all__ = [
    "SANITISED_MESSAGE",
    "format_service_error",
    "public_message",
    "service_error_response",
]
