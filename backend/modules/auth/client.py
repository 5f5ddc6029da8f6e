"""
HTTP client for the Transfers backend, used by the session manager.

Function endpoints (/functions/v1/*) are called with the public anon key as
bearer token plus the X-Auth shared secret; user endpoints (/api/users,
/api/bookings) are called with the signed-in user's access token.

Error bodies ({"error", "message", "details"}) are turned back into the
typed exceptions the server raised, so callers can catch the same classes
on both sides of the wire.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from modules.bookings.models import BookingFilter, BookingListResponse
from modules.invites.exceptions import InvalidInviteError, InviteExpiredError
from modules.invites.models import InviteValidation
from modules.password_reset.exceptions import (
    InvalidResetTokenError,
    PasswordResetRateLimitError,
    ResetTokenAlreadyUsedError,
    ResetTokenExpiredError,
    ResetTokenMismatchError,
)
from modules.password_reset.models import (
    ResetPasswordResult,
    ResetRequestResult,
    TokenCheckResult,
    TokenConsumeResult,
)
from modules.verification.exceptions import (
    CodeExpiredError,
    InvalidCodeError,
    ResendTooSoonError,
    VerificationRateLimitError,
)
from modules.verification.models import (
    EmailValidationResult,
    SendOtpResult,
    VerificationStatus,
    VerifyOtpResult,
)
from shared.clock import parse_timestamp
from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    TransfersError,
    ValidationError,
)

from .exceptions import InvalidTokenError, ExpiredTokenError, UserNotFoundError
from .models import ProfileUpdate, UserProfile

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/v1"

# Error codes whose exception can be rebuilt without arguments; the server's
# message and details are then copied onto it.
_TYPED_ERRORS: dict[str, Callable[[], TransfersError]] = {
    "INVALID_CODE": InvalidCodeError,
    "CODE_EXPIRED": CodeExpiredError,
    "INVALID_RESET_TOKEN": InvalidResetTokenError,
    "RESET_TOKEN_EXPIRED": ResetTokenExpiredError,
    "TOKEN_ALREADY_USED": ResetTokenAlreadyUsedError,
    "TOKEN_EMAIL_MISMATCH": ResetTokenMismatchError,
    "INVALID_INVITE": InvalidInviteError,
    "INVITE_EXPIRED": InviteExpiredError,
    "INVALID_TOKEN": InvalidTokenError,
    "TOKEN_EXPIRED": ExpiredTokenError,
}


def _retry_after(response: httpx.Response, details: dict[str, Any]) -> int:
    value = details.get("retryAfterSeconds") or response.headers.get("Retry-After") or 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def error_from_response(response: httpx.Response) -> TransfersError:
    """Rebuild the exception behind an error response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    code = body.get("error") or ""
    message = body.get("message") or response.reason_phrase or "Request failed"
    details = body.get("details") or {}
    status = response.status_code

    if status == 429:
        retry_after = _retry_after(response, details)
        if code == "RESEND_TOO_SOON":
            return ResendTooSoonError(retry_after)
        if details.get("nextAllowedAttempt"):
            return PasswordResetRateLimitError(
                parse_timestamp(details["nextAllowedAttempt"]), retry_after
            )
        if code == "RATE_LIMITED":
            return VerificationRateLimitError(retry_after)
        return RateLimitError(message, retry_after, code=code or None, details=details)

    factory = _TYPED_ERRORS.get(code)
    if factory is not None:
        error = factory()
        if body.get("message"):
            error.message = message
            error.args = (message,)
        error.details = {**error.details, **details}
        return error

    if status == 401:
        return AuthenticationError(message, code=code or None, details=details)
    if status == 403:
        return AuthorizationError(message, code=code or None, details=details)
    if status == 404:
        return NotFoundError(message, code=code or None, details=details)
    if status >= 500:
        return ExternalServiceError(message, service="transfers-api", code=code or None, details=details)
    return ValidationError(message, code=code or None, details=details)


class BackendClient:
    """
    Thin async client over the backend's HTTP API.

    A new httpx.AsyncClient is opened per call; the transport can be
    injected (httpx.MockTransport, httpx.ASGITransport) for tests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        shared_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._anon_key = anon_key if anon_key is not None else settings.supabase_anon_key
        self._secret = shared_secret if shared_secret is not None else settings.webhook_secret
        self._timeout = timeout or settings.retry_timeout
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        access_token: Optional[str] = None,
        with_secret: bool = True,
    ) -> Any:
        headers = {"Authorization": f"Bearer {access_token or self._anon_key}"}
        if with_secret and self._secret:
            headers["X-Auth"] = self._secret

        async with httpx.AsyncClient(
            base_url=self._base_url,
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            response = await client.request(method, path, json=json, params=params, headers=headers)

        if response.is_error:
            error = error_from_response(response)
            logger.debug(f"{method} {path} failed with {response.status_code} ({error.code})")
            raise error
        return response.json()

    # Email verification

    async def send_otp(
        self, email: str, name: Optional[str] = None, user_id: Optional[str] = None
    ) -> SendOtpResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/email-verification",
            json={"action": "send-otp", "email": email, "name": name, "user_id": user_id},
        )
        return SendOtpResult.model_validate(data)

    async def verify_otp(self, token: str, verification_id: str) -> VerifyOtpResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/email-verification",
            json={"action": "verify-otp", "token": token, "verificationId": verification_id},
        )
        return VerifyOtpResult.model_validate(data)

    async def check_verification(self, email: str) -> VerificationStatus:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/email-verification",
            json={"action": "check-verification", "email": email},
        )
        return VerificationStatus.model_validate(data)

    async def validate_email(self, email: str) -> EmailValidationResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/email-verification",
            json={"action": "validate", "email": email},
        )
        return EmailValidationResult.model_validate(data)

    # Password reset

    async def request_password_reset(
        self, email: str, reset_link: Optional[str] = None, name: Optional[str] = None
    ) -> ResetRequestResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/email-webhook",
            json={
                "email_type": "PWReset",
                "email": email,
                "name": name,
                "reset_link": reset_link,
            },
        )
        return ResetRequestResult.model_validate(data)

    async def verify_reset_token(self, token: str) -> TokenCheckResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/verify-reset-token",
            json={"token": token, "action": "verify"},
        )
        return TokenCheckResult.model_validate(data)

    async def consume_reset_token(self, token: str) -> TokenConsumeResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/verify-reset-token",
            json={"token": token, "action": "consume"},
        )
        return TokenConsumeResult.model_validate(data)

    async def reset_password(self, email: str, password: str, token: str) -> ResetPasswordResult:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/reset-password",
            json={"email": email, "password": password, "token": token},
        )
        return ResetPasswordResult.model_validate(data)

    # Invites

    async def validate_invite(self, code: str) -> InviteValidation:
        data = await self._request(
            "GET",
            f"{FUNCTIONS_PREFIX}/validate-invite",
            params={"code": code},
            with_secret=False,
        )
        return InviteValidation.model_validate(data)

    async def redeem_invite(self, code: str, user_id: str) -> str:
        data = await self._request(
            "POST",
            f"{FUNCTIONS_PREFIX}/validate-invite",
            json={"code": code, "userId": user_id},
        )
        return data["role"]

    # Signed-in user

    async def get_profile(self, access_token: str) -> UserProfile:
        try:
            data = await self._request(
                "GET", "/api/users/me", access_token=access_token, with_secret=False
            )
        except NotFoundError as e:
            raise UserNotFoundError(e.details.get("user_id", "me")) from e
        return UserProfile.model_validate(data)

    async def update_profile(self, access_token: str, updates: ProfileUpdate) -> UserProfile:
        data = await self._request(
            "PATCH",
            "/api/users/me",
            json=updates.to_row(),
            access_token=access_token,
            with_secret=False,
        )
        return UserProfile.model_validate(data)

    async def list_bookings(
        self, access_token: str, booking_filter: BookingFilter = BookingFilter.UPCOMING
    ) -> BookingListResponse:
        data = await self._request(
            "GET",
            "/api/bookings",
            params={"filter": booking_filter.value},
            access_token=access_token,
            with_secret=False,
        )
        return BookingListResponse.model_validate(data)
