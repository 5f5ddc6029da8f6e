"""
Email verification module interfaces.

The DI container picks the verification backend at startup; routes and the
session manager only see IVerificationService.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from .models import (
    EmailValidationResult,
    EmailVerification,
    MagicLinkOutcome,
    SendOtpResult,
    VerificationStatus,
    VerifyOtpResult,
)


@runtime_checkable
class IVerificationRepository(Protocol):
    """Storage of EmailVerification records."""

    def create(self, data: dict[str, Any]) -> EmailVerification:
        ...

    def get_by_id(self, verification_id: str) -> Optional[EmailVerification]:
        ...

    def get_by_magic_token(self, magic_token: str) -> Optional[EmailVerification]:
        ...

    def latest_for_email(self, email: str) -> Optional[EmailVerification]:
        """Most recently created record for the email, verified or not."""
        ...

    def list_created_since(self, email: str, since: datetime) -> list[EmailVerification]:
        """Records for the email created after `since`, oldest first."""
        ...

    def latest_unverified_for_user(self, user_id: str) -> Optional[EmailVerification]:
        ...

    def mark_verified(self, verification_id: str) -> bool:
        """
        Set verified=true only where it is still false.

        Returns:
            True if this call flipped the flag, False if no row matched
        """
        ...


@runtime_checkable
class IVerificationService(Protocol):
    """Interface for the OTP / magic-link verification backend."""

    async def send_otp(
        self,
        email: str,
        name: Optional[str] = None,
        user_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> SendOtpResult:
        """
        Issue a new code and magic link and email them.

        Raises:
            ValidationError: If the email is missing or malformed
            ResendTooSoonError: If the last send was under the resend interval ago
            VerificationRateLimitError: If the hourly send cap is reached
            EmailDeliveryError: If the email webhook failed
        """
        ...

    async def verify_otp(self, token: Optional[str], verification_id: Optional[str]) -> VerifyOtpResult:
        """
        Check a code against a verification id and complete it.

        Raises:
            MissingVerificationFieldsError: If either argument is empty
            CodeExpiredError: If the challenge expired (checked before the code)
            InvalidCodeError: Unknown id, wrong code or already verified
        """
        ...

    async def check_verification(self, email: str) -> VerificationStatus:
        """Describe the verification state of an email without mutating anything."""
        ...

    async def validate_email(self, email: str) -> EmailValidationResult:
        ...

    async def verify_magic_link(self, magic_token: str) -> MagicLinkOutcome:
        ...
