"""
Password reset data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

GENERIC_REQUEST_MESSAGE = (
    "If an account exists with this email, a password reset link has been sent."
)


class TokenState(str, Enum):
    """States of a reset token. CONSUMED and EXPIRED are terminal."""

    ISSUED = "issued"
    CONSUMED = "consumed"
    EXPIRED = "expired"


class PasswordResetToken(BaseModel):
    id: str
    token: str
    user_email: str
    expires_at: datetime
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def state(self, now: datetime) -> TokenState:
        if self.used_at is not None:
            return TokenState.CONSUMED
        if now > self.expires_at:
            return TokenState.EXPIRED
        return TokenState.ISSUED


class AttemptType(str, Enum):
    REQUEST = "request"
    RESET = "reset"


class PasswordResetAttempt(BaseModel):
    """One row of password_reset_attempts."""

    email: str
    attempt_type: AttemptType
    success: bool
    attempted_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class EmailWebhookRequest(BaseModel):
    """Body of POST /email-webhook."""

    model_config = ConfigDict(extra="ignore")

    email_type: str
    email: Optional[str] = None
    name: Optional[str] = None
    reset_link: Optional[str] = None


class TokenAction(str, Enum):
    VERIFY = "verify"
    CONSUME = "consume"


class VerifyResetTokenRequest(BaseModel):
    token: Optional[str] = None
    action: TokenAction = TokenAction.VERIFY


class ResetPasswordRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    token: Optional[str] = None


class ResetRequestResult(BaseModel):
    """Identical for known and unknown emails."""

    success: bool = True
    message: str = GENERIC_REQUEST_MESSAGE


class TokenCheckResult(BaseModel):
    valid: bool = True
    email: str


class TokenConsumeResult(BaseModel):
    success: bool = True
    email: str


class ResetPasswordResult(BaseModel):
    success: bool = True


class ClientInfo(BaseModel):
    """Caller details stored with each attempt."""

    ip_address: Optional[str] = Field(None, max_length=64)
    user_agent: Optional[str] = Field(None, max_length=512)
