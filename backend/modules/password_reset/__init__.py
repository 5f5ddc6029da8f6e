"""
Password reset module.

Issues, verifies and consumes single-use password reset tokens.

Public API:
- IPasswordResetService: Interface for reset operations
- PasswordResetToken, TokenState: token record and its lifecycle
- Reset exceptions: ResetTokenAlreadyUsedError, ResetTokenExpiredError, etc.
"""

from .interfaces import IPasswordResetService
from .models import PasswordResetToken, TokenState, GENERIC_REQUEST_MESSAGE
from .exceptions import (
    InvalidResetTokenError,
    ResetTokenExpiredError,
    ResetTokenAlreadyUsedError,
    ResetTokenMismatchError,
    PasswordResetFailedError,
    PasswordResetRateLimitError,
)

__all__ = [
    "IPasswordResetService",
    "PasswordResetToken",
    "TokenState",
    "GENERIC_REQUEST_MESSAGE",
    "InvalidResetTokenError",
    "ResetTokenExpiredError",
    "ResetTokenAlreadyUsedError",
    "ResetTokenMismatchError",
    "PasswordResetFailedError",
    "PasswordResetRateLimitError",
]
