"""
Password reset module interfaces.
"""

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from .models import (
    AttemptType,
    ClientInfo,
    PasswordResetAttempt,
    PasswordResetToken,
    ResetPasswordResult,
    ResetRequestResult,
    TokenCheckResult,
    TokenConsumeResult,
)


@runtime_checkable
class IResetTokenRepository(Protocol):
    def create(self, data: dict[str, Any]) -> PasswordResetToken:
        ...

    def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        ...

    def consume(self, token: str, now: datetime) -> bool:
        """
        Set used_at where the token is unused and unexpired, in one statement.

        Returns:
            True for the single caller that consumed the token
        """
        ...


@runtime_checkable
class IResetAttemptRepository(Protocol):
    def record(self, attempt: PasswordResetAttempt) -> None:
        ...

    def list_since(self, email: str, attempt_type: AttemptType, since: datetime) -> list[PasswordResetAttempt]:
        """Attempts of one type for an email after `since`, oldest first."""
        ...


@runtime_checkable
class IPasswordResetService(Protocol):
    """Issue, verify and consume single-use password reset tokens."""

    async def request_reset(
        self,
        email: str,
        base_url: Optional[str] = None,
        client: Optional[ClientInfo] = None,
    ) -> ResetRequestResult:
        """
        Start a reset. The result does not reveal whether the account exists.

        Raises:
            ValidationError: If the email is malformed
            PasswordResetRateLimitError: If the hourly request limit is reached
        """
        ...

    async def verify_token(self, token: str) -> TokenCheckResult:
        """Check a token without mutating it."""
        ...

    async def consume_token(self, token: str) -> TokenConsumeResult:
        """Mark a token used. Exactly one concurrent caller succeeds."""
        ...

    async def reset_password(
        self,
        email: str,
        password: str,
        token: str,
        client: Optional[ClientInfo] = None,
    ) -> ResetPasswordResult:
        ...
