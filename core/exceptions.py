"""Custom Exception Hierarchy for the voice-over backend
This module defines a typed exception hierarchy that enables precise error
handling and structured error responses across the application.

Exception Handling Flow:
    1. Service layer raises typed exception
    2. FastAPI exception handler catches it (see main.py)
    3. Handler converts to structured JSON response using ``status_code``
    4. Client receives error envelope with code, message, and context
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base exception for all service layer errors."""

    status_code: int = 500

    def __init__(self, message: str = "Service error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Raised when authentication fails for HTTP requests."""

    status_code = 401

    def __init__(self, message: str = "Authentication required", reason: str | None = None):
        self.reason = reason
        super().__init__(message)

    @property
    def code(self) -> int:
        return self.status_code


class ForbiddenError(ServiceError):
    """Raised when an authenticated caller may not perform the action."""

    status_code = 403


class NotFoundError(ServiceError):
    """Raised when a requested resource cannot be located."""

    status_code = 404

    def __init__(self, message: str, resource: str | None = None):
        self.resource = resource
        super().__init__(message)


class UserNotFoundError(NotFoundError):
    """Raised when no user record exists for an identifier."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("User data not found", resource="user")


class QuotaExceededError(ServiceError):
    """Raised when a user has exhausted their generation allowance."""

    status_code = 429

    def __init__(self, current: int, limit: int, message: str | None = None):
        self.current = current
        self.limit = limit
        super().__init__(message or f"Generation limit reached ({current}/{limit})")


class ConfigurationError(ServiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        super().__init__(message)


class UpstreamError(ServiceError):
    """Raised when the external speech API fails."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
    ):
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)


class UpstreamAuthError(UpstreamError):
    """Raised when the speech API rejects the configured credential."""


class UpstreamQuotaError(UpstreamError):
    """Raised when the speech API reports rate or usage limiting."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        original_error: Exception | None = None,
        retry_after: int | None = None,
    ):
        super().__init__(message, provider=provider, original_error=original_error)
        self.retry_after = retry_after


class NetworkError(UpstreamError):
    """Raised on transport failures or timeouts talking to the speech API."""


class EmptyResponseError(UpstreamError):
    """Raised when the speech API response carries no audio payload."""


class PersistenceError(ServiceError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        super().__init__(message)


class StorageError(PersistenceError):
    """Raised when a blob storage write fails."""


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "EmptyResponseError",
    "ForbiddenError",
    "NetworkError",
    "NotFoundError",
    "PersistenceError",
    "QuotaExceededError",
    "ServiceError",
    "StorageError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamQuotaError",
    "UserNotFoundError",
    "ValidationError",
]
