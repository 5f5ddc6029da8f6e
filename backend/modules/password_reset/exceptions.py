"""
Password reset exceptions.
"""

from datetime import datetime

from shared.exceptions import RateLimitError, ValidationError


class PasswordResetError(ValidationError):
    """Base for reset failures surfaced as 400."""

    pass


class InvalidResetTokenError(PasswordResetError):
    def __init__(self):
        super().__init__("Invalid or expired token", code="INVALID_RESET_TOKEN")


class ResetTokenExpiredError(PasswordResetError):
    def __init__(self):
        super().__init__("This reset link has expired", code="RESET_TOKEN_EXPIRED")


class ResetTokenAlreadyUsedError(PasswordResetError):
    def __init__(self):
        super().__init__("This reset link has already been used", code="TOKEN_ALREADY_USED")


class ResetTokenMismatchError(PasswordResetError):
    def __init__(self):
        super().__init__("Token does not match email", code="TOKEN_EMAIL_MISMATCH")


class PasswordResetFailedError(PasswordResetError):
    """The token was valid but the password could not be changed."""

    def __init__(self, message: str = "Error processing password reset"):
        super().__init__(message, code="PASSWORD_RESET_FAILED")


class UnsupportedEmailTypeError(ValidationError):
    def __init__(self, email_type: str):
        super().__init__(
            f"Unsupported email type: {email_type}",
            code="UNSUPPORTED_EMAIL_TYPE",
            details={"email_type": email_type},
        )


class PasswordResetRateLimitError(RateLimitError):
    """Too many reset requests for one email; carries the next allowed time."""

    def __init__(self, next_allowed_attempt: datetime, retry_after_seconds: int):
        super().__init__(
            "Too many password reset requests. Please try again later.",
            retry_after_seconds=retry_after_seconds,
            details={"nextAllowedAttempt": next_allowed_attempt.isoformat()},
        )
        self.next_allowed_attempt = next_allowed_attempt
