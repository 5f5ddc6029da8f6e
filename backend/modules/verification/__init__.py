"""
Email verification module.

Issues and checks OTP codes and magic links for email ownership.

Public API:
- IVerificationService: Interface for verification operations
- VerificationService / DevelopmentVerificationService: the two backends
- Verification exceptions: InvalidCodeError, CodeExpiredError, etc.
"""

from .interfaces import IVerificationService, IVerificationRepository
from .models import (
    EmailVerification,
    SendOtpResult,
    VerifyOtpResult,
    VerificationStatus,
)
from .exceptions import (
    InvalidCodeError,
    CodeExpiredError,
    MissingVerificationFieldsError,
    ResendTooSoonError,
    VerificationRateLimitError,
)

__all__ = [
    # Interfaces
    "IVerificationService",
    "IVerificationRepository",
    # Models
    "EmailVerification",
    "SendOtpResult",
    "VerifyOtpResult",
    "VerificationStatus",
    # Exceptions
    "InvalidCodeError",
    "CodeExpiredError",
    "MissingVerificationFieldsError",
    "ResendTooSoonError",
    "VerificationRateLimitError",
]
