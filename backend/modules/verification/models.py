"""
Email verification data models.

Wire models use camelCase aliases to match the browser client; Python code
reads them by field name.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class VerificationAction(str, Enum):
    """Operations dispatched by the verification endpoint."""

    SEND_OTP = "send-otp"
    VERIFY_OTP = "verify-otp"
    CHECK_VERIFICATION = "check-verification"
    VALIDATE = "validate"


class EmailVerification(BaseModel):
    """
    One OTP / magic-link challenge.

    Stale records stay in the table; the newest unverified record for a
    user is the authoritative one.
    """

    id: str
    user_id: Optional[str] = None
    email: str
    token: str = Field(..., description="Six-character code entered by the user")
    magic_token: str = Field(..., description="Opaque token carried by the magic link")
    created_at: datetime
    expires_at: datetime
    verified: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class VerificationRequest(BaseModel):
    """Body of POST /email-verification."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: VerificationAction
    email: Optional[str] = None
    name: Optional[str] = None
    user_id: Optional[str] = None
    token: Optional[str] = None
    verification_id: Optional[str] = Field(None, alias="verificationId")


class SendOtpResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Verification email sent successfully"
    verification_id: str = Field(..., alias="verificationId")
    remaining_attempts: int = Field(..., alias="remainingAttempts")


class VerifyOtpResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Email verified successfully"
    user_id: Optional[str] = Field(None, alias="userId")
    email: Optional[str] = None


class VerificationStatus(BaseModel):
    """Read-only verification state for an email."""

    model_config = ConfigDict(populate_by_name=True)

    verified: bool = False
    exists: bool = False
    requires_verification: bool = Field(False, alias="requiresVerification")
    has_pending_verification: bool = Field(False, alias="hasPendingVerification")
    verification_age: Optional[int] = Field(None, alias="verificationAge")


class EmailValidationResult(BaseModel):
    valid: bool
    suggested: Optional[str] = None


class MagicLinkOutcome(str, Enum):
    VERIFIED = "verified"
    INVALID = "invalid"
    EXPIRED = "expired"
