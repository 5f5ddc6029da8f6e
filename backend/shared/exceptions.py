"""
Base exception classes for the Transfers backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class TransfersError(Exception):
    """
    Base exception for all Transfers errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(TransfersError):
    """Resource not found."""

    pass


class ValidationError(TransfersError):
    """Input validation failed."""

    pass


class AuthenticationError(TransfersError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(TransfersError):
    """Authorization failed (insufficient permissions)."""

    pass


class RateLimitError(TransfersError):
    """
    Too many attempts for an identity within a time window.

    retry_after_seconds is exposed to HTTP clients as the Retry-After header.
    """

    def __init__(
        self,
        message: str,
        retry_after_seconds: int,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code or "RATE_LIMITED", details)
        self.retry_after_seconds = max(1, int(retry_after_seconds))
        self.details["retryAfterSeconds"] = self.retry_after_seconds


class ExternalServiceError(TransfersError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
