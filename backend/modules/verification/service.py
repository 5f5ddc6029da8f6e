"""
Email verification service.

Issues six-character codes plus magic-link tokens, enforces the resend
interval and hourly cap, and completes verification with a conditional
update so a code can only ever succeed once.
"""

import logging
import math
import secrets
import string
import uuid
from datetime import timedelta
from typing import Optional

from shared.clock import Clock, utc_now
from shared.config import Settings, get_settings
from shared.email import EmailMessage, EmailType, IEmailSender
from shared.validators import (
    is_valid_email,
    is_valid_otp,
    normalize_email,
    normalize_otp,
    require_valid_email,
    suggest_email_correction,
)
from modules.auth.interfaces import IUserRepository

from .exceptions import (
    CodeExpiredError,
    InvalidCodeError,
    MissingVerificationFieldsError,
    ResendTooSoonError,
    VerificationRateLimitError,
)
from .interfaces import IVerificationRepository, IVerificationService
from .models import (
    EmailValidationResult,
    EmailVerification,
    MagicLinkOutcome,
    SendOtpResult,
    VerificationStatus,
    VerifyOtpResult,
)

logger = logging.getLogger(__name__)

RATE_WINDOW = timedelta(hours=1)


def generate_otp() -> str:
    """Random code in the 00a000 format."""
    return (
        f"{secrets.randbelow(100):02d}"
        f"{secrets.choice(string.ascii_lowercase)}"
        f"{secrets.randbelow(1000):03d}"
    )


def generate_magic_token() -> str:
    return uuid.uuid4().hex


class VerificationService(IVerificationService):
    """
    Verification backed by the email_verifications table.

    Dependencies are injected so the DI container can assemble either the
    Supabase-backed or the in-memory variant.
    """

    def __init__(
        self,
        verifications: IVerificationRepository,
        users: IUserRepository,
        email_sender: IEmailSender,
        settings: Optional[Settings] = None,
        clock: Clock = utc_now,
    ):
        self._verifications = verifications
        self._users = users
        self._email = email_sender
        self._settings = settings or get_settings()
        self._clock = clock

    async def send_otp(
        self,
        email: str,
        name: Optional[str] = None,
        user_id: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> SendOtpResult:
        email = require_valid_email(email)
        now = self._clock()

        self._check_send_limits(email, now)
        sent_in_window = len(self._verifications.list_created_since(email, now - RATE_WINDOW))

        user_id = self._resolve_user_id(email, user_id)

        otp_code = generate_otp()
        magic_token = generate_magic_token()
        expires_at = now + timedelta(minutes=self._settings.otp_expiry_minutes)

        record = self._verifications.create(
            {
                "user_id": user_id,
                "email": email,
                "token": otp_code,
                "magic_token": magic_token,
                "created_at": now.isoformat(),
                "expires_at": expires_at.isoformat(),
                "verified": False,
            }
        )
        logger.info(f"Created verification {record.id} for user {user_id or '-'}")

        base = (base_url or self._settings.frontend_url).rstrip("/")
        await self._email.send(
            EmailMessage(
                email_type=EmailType.OTP,
                email=email,
                name=name or email.split("@")[0],
                otp_code=otp_code,
                verify_link=f"{base}/verify-email?token={magic_token}&redirect=/login",
            )
        )

        remaining = max(0, self._settings.otp_send_limit_per_hour - (sent_in_window + 1))
        return SendOtpResult(verification_id=record.id, remaining_attempts=remaining)

    def _resolve_user_id(self, email: str, user_id: Optional[str]) -> Optional[str]:
        """
        The user a verification will mark verified.

        A caller-supplied user_id is kept only when that user owns the email;
        otherwise the owner is looked up by email.
        """
        if user_id:
            user = self._users.get_by_id(user_id)
            if user is not None and normalize_email(user.email) == email:
                return user.id
            logger.warning(f"Ignoring user_id {user_id} that does not own the email being verified")

        user = self._users.get_by_email(email)
        return user.id if user else None

    def _check_send_limits(self, email: str, now) -> None:
        """
        Resend interval first, then the hourly cap. Neither creates a record.
        """
        latest = self._verifications.latest_for_email(email)
        if latest is not None:
            elapsed = (now - latest.created_at).total_seconds()
            interval = self._settings.otp_min_resend_interval_seconds
            if elapsed < interval:
                logger.info(f"Resend too soon for verification {latest.id}")
                raise ResendTooSoonError(math.ceil(interval - elapsed))

        recent = self._verifications.list_created_since(email, now - RATE_WINDOW)
        if len(recent) >= self._settings.otp_send_limit_per_hour:
            retry_after = (recent[0].created_at + RATE_WINDOW - now).total_seconds()
            logger.info("Hourly verification send cap reached")
            raise VerificationRateLimitError(math.ceil(retry_after))

    async def verify_otp(self, token: Optional[str], verification_id: Optional[str]) -> VerifyOtpResult:
        if not token or not verification_id:
            raise MissingVerificationFieldsError()

        record = self._verifications.get_by_id(verification_id)
        if record is None:
            raise InvalidCodeError()

        # Expiry wins over every other outcome, a malformed code included
        if record.is_expired(self._clock()):
            raise CodeExpiredError(verification_id)

        code = normalize_otp(token)
        if not is_valid_otp(code):
            raise InvalidCodeError("Invalid verification code format")

        if record.verified or not secrets.compare_digest(normalize_otp(record.token), code):
            raise InvalidCodeError()

        if not self._complete(record):
            raise InvalidCodeError()

        return VerifyOtpResult(user_id=record.user_id, email=record.email)

    async def check_verification(self, email: str) -> VerificationStatus:
        email = require_valid_email(email)
        user = self._users.get_by_email(email)
        if user is None:
            return VerificationStatus()

        pending = False
        age: Optional[int] = None
        latest = self._verifications.latest_unverified_for_user(user.id)
        if latest is not None:
            minutes = (self._clock() - latest.created_at).total_seconds() / 60
            pending = minutes < self._settings.otp_pending_window_minutes
            age = round(minutes)

        return VerificationStatus(
            verified=user.email_verified,
            exists=True,
            requires_verification=not user.email_verified,
            has_pending_verification=pending,
            verification_age=age,
        )

    async def validate_email(self, email: str) -> EmailValidationResult:
        return EmailValidationResult(
            valid=is_valid_email(email),
            suggested=suggest_email_correction(email),
        )

    async def verify_magic_link(self, magic_token: str) -> MagicLinkOutcome:
        if not magic_token:
            return MagicLinkOutcome.INVALID

        record = self._verifications.get_by_magic_token(magic_token)
        if record is None:
            return MagicLinkOutcome.INVALID
        if record.is_expired(self._clock()):
            return MagicLinkOutcome.EXPIRED

        # A second click on an already-used link still lands on the success page
        self._complete(record)
        return MagicLinkOutcome.VERIFIED

    def _complete(self, record: EmailVerification) -> bool:
        """
        Flip verified and propagate to the owning user.

        Returns False when another request already completed the record;
        user propagation happens only for the request that flipped it.
        """
        if not self._verifications.mark_verified(record.id):
            return False

        logger.info(f"Verification {record.id} completed")
        if record.user_id:
            self._users.set_email_verified(record.user_id)
            try:
                self._users.sync_auth_email_verified(record.user_id)
            except Exception as e:
                logger.warning(f"Could not update auth metadata for {record.user_id} (non-critical): {e}")
        return True


class DevelopmentVerificationService(VerificationService):
    """
    Local-testing backend.

    Wired with in-memory repositories and the logging email sender. Ids it
    issues carry the development prefix, and for those ids any well-formed
    code is accepted. The DI container refuses to build it in production.
    """

    async def verify_otp(self, token: Optional[str], verification_id: Optional[str]) -> VerifyOtpResult:
        prefix = self._settings.dev_verification_prefix
        if not verification_id or not verification_id.startswith(prefix):
            return await super().verify_otp(token, verification_id)

        if not token:
            raise MissingVerificationFieldsError()
        if not is_valid_otp(token):
            raise InvalidCodeError("Invalid verification code format")

        logger.info(f"[dev] Accepting code for {verification_id}")
        record = self._verifications.get_by_id(verification_id)
        if record is None:
            return VerifyOtpResult()
        self._complete(record)
        return VerifyOtpResult(user_id=record.user_id, email=normalize_email(record.email))
