"""
Client-side session manager.

Holds the signed-in session and profile for one browser and exposes the
account flows the pages need: sign-up (optionally with an invite), sign-in,
email verification, password reset, profile updates and bookings. Input
that can be checked locally (code format, password length, email shape) is
rejected before any network call.

Profile and booking fetches go through shared.retry.with_retry. Access
errors (expired session, RLS denial) are not retried; they end in a short
delay and a redirect to /login via the injected navigator.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from modules.bookings.models import BookingFilter, BookingListResponse
from modules.password_reset.models import (
    ResetPasswordResult,
    ResetRequestResult,
    TokenCheckResult,
    TokenConsumeResult,
)
from modules.verification.exceptions import InvalidCodeError, MissingVerificationFieldsError
from modules.verification.models import SendOtpResult, VerificationStatus, VerifyOtpResult
from shared.config import Settings, get_settings
from shared.exceptions import TransfersError
from shared.retry import ACCESS_KINDS, RetryPolicy, classify_error, user_message, with_retry
from shared.validators import (
    is_valid_otp,
    normalize_email,
    normalize_otp,
    require_valid_email,
    validate_password,
)

from .client import BackendClient
from .exceptions import NotSignedInError, ProfileFetchError
from .identity import IIdentityProvider
from .models import (
    AuthSession,
    ProfileUpdate,
    SignInResult,
    SignUpResult,
    UserProfile,
    UserRole,
)

logger = logging.getLogger(__name__)

Navigator = Callable[[str], None]

LOGIN_PATH = "/login"
HOME_PATH = "/"


def _log_navigation(path: str) -> None:
    logger.info(f"Navigate to {path}")


class AuthSessionManager:
    """
    Session state plus the account operations built on it.

    State is per instance: one manager per browser session.
    """

    def __init__(
        self,
        identity: IIdentityProvider,
        backend: BackendClient,
        navigator: Navigator = _log_navigation,
        retry_policy: Optional[RetryPolicy] = None,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._identity = identity
        self._backend = backend
        self._navigate = navigator
        self._retry_policy = retry_policy or RetryPolicy.from_settings()
        self._settings = settings or get_settings()
        self._sleep = sleep

        self.session: Optional[AuthSession] = None
        self.profile: Optional[UserProfile] = None
        self.verification_id: Optional[str] = None
        self.loading = False

    @property
    def is_signed_in(self) -> bool:
        return self.session is not None

    def _require_session(self) -> AuthSession:
        if self.session is None:
            raise NotSignedInError()
        return self.session

    async def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        invite_code: Optional[str] = None,
    ) -> SignUpResult:
        """
        Create an account and send the first verification code.

        An invite code is validated before the account is created and
        redeemed after. A failed redemption or code send is logged; the
        account exists either way and the code can be re-sent.

        Raises:
            ValidationError: Bad email or password
            InvalidInviteError / InviteExpiredError: Unusable invite code
            AccountExistsError: Email already registered
        """
        email = require_valid_email(email)
        validate_password(password, self._settings.password_min_length)
        name = (name or "").strip()
        invite_code = (invite_code or "").strip() or None

        self.loading = True
        try:
            role = UserRole.CUSTOMER.value
            if invite_code:
                invite = await self._backend.validate_invite(invite_code)
                role = invite.role

            metadata: dict[str, Any] = {
                "name": name,
                "phone": (phone or "").strip() or None,
                "email_verified": False,
            }
            if invite_code:
                metadata["invite_code"] = invite_code
            user = await self._identity.sign_up(email, password, metadata)
            if user.session:
                self.session = user.session

            if invite_code:
                try:
                    role = await self._backend.redeem_invite(invite_code, user.id)
                except TransfersError as e:
                    logger.error(f"Failed to redeem invite for user {user.id}: {e.message}")
                    role = UserRole.CUSTOMER.value

            verification: Optional[SendOtpResult] = None
            try:
                verification = await self._backend.send_otp(email, name=name, user_id=user.id)
                self.verification_id = verification.verification_id
            except TransfersError as e:
                logger.warning(f"Verification email not sent after sign-up: {e.message}")

            return SignUpResult(
                user_id=user.id,
                email=email,
                role=role,
                verification_id=verification.verification_id if verification else None,
                remaining_attempts=verification.remaining_attempts if verification else None,
            )
        finally:
            self.loading = False

    async def sign_in(self, email: str, password: str) -> SignInResult:
        """
        Sign in with email and password and load the profile.

        A missing profile does not fail the sign-in. When the profile carries
        a role the session is refreshed so the access token's role claim
        matches it.

        Raises:
            InvalidCredentialsError: Email/password rejected
        """
        self.loading = True
        try:
            session = await self._identity.sign_in(normalize_email(email), password)
            self.session = session

            profile: Optional[UserProfile] = None
            try:
                profile = await self.fetch_user_data(session.user_id)
            except ProfileFetchError as e:
                logger.warning(f"Signed in without profile for {session.user_id}: {e.message}")

            if profile and profile.role:
                await self.refresh_session()

            verified = profile.email_verified if profile else session.email_verified
            return SignInResult(
                session=self.session,
                profile=profile,
                requires_verification=not verified,
            )
        finally:
            self.loading = False

    async def fetch_user_data(self, user_id: Optional[str] = None) -> Optional[UserProfile]:
        """
        Load the signed-in user's profile.

        Tries the privileged backend endpoint first and falls back to a
        direct, permission-checked query. Both go through the retry policy.

        Returns:
            The profile, or None when no users row exists yet

        Raises:
            ProfileFetchError: Both lookups failed
        """
        session = self._require_session()
        user_id = user_id or session.user_id

        try:
            profile: Optional[UserProfile] = await with_retry(
                lambda: self._backend.get_profile(session.access_token),
                self._retry_policy,
            )
        except Exception as primary:
            logger.warning(
                f"Profile endpoint failed for {user_id} ({classify_error(primary).value}), "
                f"falling back to direct query"
            )
            try:
                profile = await with_retry(
                    lambda: self._identity.query_profile(user_id),
                    self._retry_policy,
                )
            except Exception as fallback:
                kind = classify_error(fallback)
                raise ProfileFetchError(user_id, kind, user_message(fallback, kind)) from fallback

        self.profile = profile
        return profile

    async def fetch_bookings(
        self, booking_filter: BookingFilter = BookingFilter.UPCOMING
    ) -> BookingListResponse:
        """
        Load the signed-in user's bookings.

        On an access error the user is sent to the login page before the
        error propagates.
        """
        session = self._require_session()
        try:
            return await with_retry(
                lambda: self._backend.list_bookings(session.access_token, booking_filter),
                self._retry_policy,
            )
        except Exception as e:
            if classify_error(e) in ACCESS_KINDS:
                await self.handle_access_error(e)
            raise

    async def refresh_session(self) -> bool:
        """Refresh the access token. Failure leaves the current session in place."""
        try:
            self.session = await self._identity.refresh_session()
            return True
        except Exception as e:
            logger.warning(f"Session refresh failed: {e}")
            return False

    async def sign_out(self) -> None:
        self.session = None
        self.profile = None
        self.verification_id = None
        try:
            await self._identity.sign_out()
        except Exception as e:
            logger.error(f"Sign-out at identity provider failed: {e}")
        self._navigate(HOME_PATH)

    async def update_profile(self, updates: ProfileUpdate) -> UserProfile:
        session = self._require_session()
        previous_role = self.profile.role if self.profile else None
        profile = await self._backend.update_profile(session.access_token, updates)
        self.profile = profile
        if previous_role is not None and profile.role != previous_role:
            await self.refresh_session()
        return profile

    # Email verification

    async def send_verification(
        self, email: Optional[str] = None, name: Optional[str] = None
    ) -> SendOtpResult:
        """Send (or re-send) a verification code to the given or current email."""
        if email is None:
            email = self.profile.email if self.profile else self._require_session().email
        if name is None and self.profile:
            name = self.profile.name
        user_id = self.session.user_id if self.session else None

        result = await self._backend.send_otp(require_valid_email(email), name=name, user_id=user_id)
        self.verification_id = result.verification_id
        return result

    async def check_verification(self, email: str) -> VerificationStatus:
        return await self._backend.check_verification(require_valid_email(email))

    async def verify_otp(
        self, code: str, verification_id: Optional[str] = None
    ) -> VerifyOtpResult:
        """
        Submit a verification code.

        Codes not in the 00a000 format are rejected without a request.
        """
        if not is_valid_otp(code):
            raise InvalidCodeError("Invalid verification code format")
        verification_id = verification_id or self.verification_id
        if not verification_id:
            raise MissingVerificationFieldsError()

        result = await self._backend.verify_otp(normalize_otp(code), verification_id)

        if self.profile and (result.user_id is None or result.user_id == self.profile.id):
            self.profile = self.profile.model_copy(update={"email_verified": True})
        if self.session:
            await self.refresh_session()
        return result

    # Password reset

    async def request_password_reset(
        self, email: str, reset_link: Optional[str] = None
    ) -> ResetRequestResult:
        return await self._backend.request_password_reset(require_valid_email(email), reset_link)

    async def verify_reset_token(self, token: str) -> TokenCheckResult:
        return await self._backend.verify_reset_token(token)

    async def consume_reset_token(self, token: str) -> TokenConsumeResult:
        return await self._backend.consume_reset_token(token)

    async def reset_password(self, email: str, password: str, token: str) -> ResetPasswordResult:
        validate_password(password, self._settings.password_min_length)
        return await self._backend.reset_password(require_valid_email(email), password, token)

    async def handle_access_error(self, error: BaseException) -> str:
        """
        Turn an error into a user-facing message.

        For auth and permission errors, waits auth_redirect_delay seconds
        and navigates to the login page.
        """
        kind = classify_error(error)
        message = user_message(error, kind)
        if kind in ACCESS_KINDS:
            logger.info(f"Access error ({kind.value}), redirecting to login")
            await self._sleep(self._settings.auth_redirect_delay)
            self._navigate(LOGIN_PATH)
        return message
