"""
Password reset service.

Token lifecycle: ISSUED -> CONSUMED (used_at set) or ISSUED -> EXPIRED
(checked on read). Requests answer the same way whether or not the account
exists, and are rate limited per email.
"""

import logging
import math
import secrets
from datetime import timedelta
from typing import Optional

from shared.clock import Clock, utc_now
from shared.config import Settings, get_settings
from shared.email import EmailDeliveryError, EmailMessage, EmailType, IEmailSender
from shared.validators import normalize_email, require_valid_email, validate_password
from modules.auth.interfaces import IUserRepository

from .exceptions import (
    InvalidResetTokenError,
    PasswordResetFailedError,
    PasswordResetRateLimitError,
    ResetTokenAlreadyUsedError,
    ResetTokenExpiredError,
    ResetTokenMismatchError,
)
from .interfaces import IPasswordResetService, IResetAttemptRepository, IResetTokenRepository
from .models import (
    AttemptType,
    ClientInfo,
    PasswordResetAttempt,
    PasswordResetToken,
    ResetPasswordResult,
    ResetRequestResult,
    TokenCheckResult,
    TokenConsumeResult,
    TokenState,
)

logger = logging.getLogger(__name__)

RATE_WINDOW = timedelta(hours=1)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


class PasswordResetService(IPasswordResetService):
    """Reset tokens stored through injected repositories."""

    def __init__(
        self,
        tokens: IResetTokenRepository,
        attempts: IResetAttemptRepository,
        users: IUserRepository,
        email_sender: IEmailSender,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self._tokens = tokens
        self._attempts = attempts
        self._users = users
        self._email = email_sender
        self._settings = settings or get_settings()
        self._clock = clock

    async def request_reset(
        self,
        email: str,
        base_url: Optional[str] = None,
        client: Optional[ClientInfo] = None,
    ) -> ResetRequestResult:
        email = require_valid_email(email)
        now = self._clock()
        self._check_request_limit(email, now)

        user = self._users.get_by_email(email)
        # Recorded for unknown emails too, so the limit doesn't reveal existence
        self._record_attempt(email, AttemptType.REQUEST, user is not None, now, client)

        if user is None:
            logger.info("Password reset requested for unknown email")
            return ResetRequestResult()

        record = self._tokens.create(
            {
                "token": generate_reset_token(),
                "user_email": email,
                "expires_at": (now + timedelta(minutes=self._settings.reset_token_ttl_minutes)).isoformat(),
                "created_at": now.isoformat(),
            }
        )
        logger.info(f"Issued password reset token {record.id} for user {user.id}")

        base = (base_url or self._settings.frontend_url).rstrip("/")
        try:
            await self._email.send(
                EmailMessage(
                    email_type=EmailType.PASSWORD_RESET,
                    email=email,
                    name=user.name or email.split("@")[0],
                    reset_link=f"{base}/reset-password?token={record.token}",
                )
            )
        except EmailDeliveryError as e:
            logger.error(f"Password reset email for user {user.id} failed: {e.message}")

        return ResetRequestResult()

    def _check_request_limit(self, email: str, now) -> None:
        recent = self._attempts.list_since(email, AttemptType.REQUEST, now - RATE_WINDOW)
        if len(recent) >= self._settings.reset_request_limit_per_hour:
            next_allowed = recent[0].attempted_at + RATE_WINDOW
            logger.info("Password reset request limit reached")
            raise PasswordResetRateLimitError(
                next_allowed_attempt=next_allowed,
                retry_after_seconds=math.ceil((next_allowed - now).total_seconds()),
            )

    def _load_issued(self, token: Optional[str]) -> PasswordResetToken:
        """Look a token up and require it to be in the ISSUED state."""
        if not token:
            raise InvalidResetTokenError()
        record = self._tokens.get_by_token(token)
        if record is None:
            raise InvalidResetTokenError()

        state = record.state(self._clock())
        if state == TokenState.CONSUMED:
            raise ResetTokenAlreadyUsedError()
        if state == TokenState.EXPIRED:
            raise ResetTokenExpiredError()
        return record

    def _consume(self, record: PasswordResetToken) -> None:
        if not self._tokens.consume(record.token, self._clock()):
            # Lost the race to another consumer, or expired in between
            raise ResetTokenAlreadyUsedError()
        logger.info(f"Password reset token {record.id} consumed")

    async def verify_token(self, token: str) -> TokenCheckResult:
        record = self._load_issued(token)
        return TokenCheckResult(email=record.user_email)

    async def consume_token(self, token: str) -> TokenConsumeResult:
        record = self._load_issued(token)
        self._consume(record)
        return TokenConsumeResult(email=record.user_email)

    async def reset_password(
        self,
        email: str,
        password: str,
        token: str,
        client: Optional[ClientInfo] = None,
    ) -> ResetPasswordResult:
        email = require_valid_email(email)
        validate_password(password, self._settings.password_min_length)

        record = self._load_issued(token)
        if normalize_email(record.user_email) != email:
            logger.warning(f"Password reset token {record.id} used with a different email")
            raise ResetTokenMismatchError()

        # Consumed before the password changes to close the replay window
        self._consume(record)

        user = self._users.get_by_email(email)
        if user is None:
            raise PasswordResetFailedError("User not found")

        self._users.update_password(user.id, password)
        logger.info(f"Password reset completed for user {user.id}")

        try:
            self._record_attempt(email, AttemptType.RESET, True, self._clock(), client)
        except Exception as e:
            logger.warning(f"Could not record password reset attempt (non-critical): {e}")

        return ResetPasswordResult()

    def _record_attempt(self, email, attempt_type, success, now, client: Optional[ClientInfo]) -> None:
        client = client or ClientInfo()
        self._attempts.record(
            PasswordResetAttempt(
                email=email,
                attempt_type=attempt_type,
                success=success,
                attempted_at=now,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
        )
