"""
Email verification exceptions.

Codes are stable so the browser client can pick its copy from them.
"""

from typing import Optional

from shared.exceptions import RateLimitError, ValidationError


class VerificationError(ValidationError):
    """Base for verification failures surfaced as 400."""

    pass


class InvalidCodeError(VerificationError):
    """
    Unknown verification id, wrong code, malformed code, or a record
    that was already verified.
    """

    def __init__(self, message: str = "Invalid verification code"):
        super().__init__(message, code="INVALID_CODE")


class CodeExpiredError(VerificationError):
    """The challenge's expires_at is in the past."""

    def __init__(self, verification_id: Optional[str] = None):
        super().__init__(
            "Verification code has expired",
            code="CODE_EXPIRED",
            details={"verificationId": verification_id} if verification_id else {},
        )


class MissingVerificationFieldsError(VerificationError):
    def __init__(self):
        super().__init__(
            "Verification code and ID are required",
            code="MISSING_FIELDS",
        )


class ResendTooSoonError(RateLimitError):
    """A code was sent to this email less than the minimum interval ago."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            f"Please wait {retry_after_seconds} seconds before requesting a new code",
            retry_after_seconds=retry_after_seconds,
            code="RESEND_TOO_SOON",
        )


class VerificationRateLimitError(RateLimitError):
    """The hourly send cap for this email is reached."""

    def __init__(self, retry_after_seconds: int):
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            retry_after_seconds=retry_after_seconds,
            code="RATE_LIMITED",
            details={"remainingAttempts": 0},
        )
