"""
Tests for BackendClient request shape and error mapping.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest

from modules.auth.client import BackendClient, error_from_response
from modules.bookings.models import BookingFilter
from modules.password_reset.exceptions import (
    PasswordResetRateLimitError,
    ResetTokenAlreadyUsedError,
)
from modules.verification.exceptions import (
    CodeExpiredError,
    InvalidCodeError,
    ResendTooSoonError,
    VerificationRateLimitError,
)
from shared.exceptions import (
    AuthenticationError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)


def _client(handler) -> BackendClient:
    return BackendClient(
        base_url="http://api.test",
        anon_key="anon-key",
        shared_secret="shared",
        transport=httpx.MockTransport(handler),
    )


class TestRequests:
    @pytest.mark.asyncio
    async def test_send_otp_uses_anon_key_and_secret(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("authorization")
            seen["x_auth"] = request.headers.get("x-auth")
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Verification email sent successfully",
                    "verificationId": "ver-1",
                    "remainingAttempts": 4,
                },
            )

        result = await _client(handler).send_otp("a@b.com", name="Ann", user_id="u-1")

        assert seen["path"] == "/functions/v1/email-verification"
        assert seen["auth"] == "Bearer anon-key"
        assert seen["x_auth"] == "shared"
        assert seen["body"]["action"] == "send-otp"
        assert result.verification_id == "ver-1"
        assert result.remaining_attempts == 4

    @pytest.mark.asyncio
    async def test_verify_otp_sends_camel_case_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body == {"action": "verify-otp", "token": "12a345", "verificationId": "ver-1"}
            return httpx.Response(200, json={"success": True, "userId": "u-1", "email": "a@b.com"})

        result = await _client(handler).verify_otp("12a345", "ver-1")
        assert result.user_id == "u-1"

    @pytest.mark.asyncio
    async def test_user_endpoints_use_access_token_without_secret(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.headers["authorization"] == "Bearer user-token"
            assert "x-auth" not in request.headers
            assert request.url.params["filter"] == "past"
            return httpx.Response(200, json={"bookings": [], "total": 0, "filter": "past"})

        result = await _client(handler).list_bookings("user-token", BookingFilter.PAST)
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_redeem_invite_returns_role(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert json.loads(request.content) == {"code": "VIP", "userId": "u-1"}
            return httpx.Response(200, json={"success": True, "role": "partner"})

        assert await _client(handler).redeem_invite("VIP", "u-1") == "partner"

    @pytest.mark.asyncio
    async def test_error_response_raises_typed_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error": "TOKEN_ALREADY_USED", "message": "This reset link has already been used", "details": {}},
            )

        with pytest.raises(ResetTokenAlreadyUsedError):
            await _client(handler).consume_reset_token("tok")


class TestErrorMapping:
    def _response(self, status, body=None, headers=None):
        return httpx.Response(status, json=body if body is not None else {}, headers=headers)

    def test_resend_too_soon(self):
        error = error_from_response(
            self._response(429, {"error": "RESEND_TOO_SOON", "details": {"retryAfterSeconds": 42}})
        )
        assert isinstance(error, ResendTooSoonError)
        assert error.retry_after_seconds == 42

    def test_hourly_verification_limit(self):
        error = error_from_response(
            self._response(429, {"error": "RATE_LIMITED", "details": {}}, headers={"Retry-After": "900"})
        )
        assert isinstance(error, VerificationRateLimitError)
        assert error.retry_after_seconds == 900

    def test_password_reset_limit_keeps_next_allowed_attempt(self):
        next_allowed = datetime(2025, 6, 1, 13, 0, tzinfo=timezone.utc)
        error = error_from_response(
            self._response(
                429,
                {
                    "error": "RATE_LIMITED",
                    "details": {"nextAllowedAttempt": next_allowed.isoformat(), "retryAfterSeconds": 60},
                },
            )
        )
        assert isinstance(error, PasswordResetRateLimitError)
        assert error.next_allowed_attempt == next_allowed

    def test_known_code(self):
        assert isinstance(
            error_from_response(self._response(400, {"error": "CODE_EXPIRED"})),
            CodeExpiredError,
        )

    def test_status_fallbacks(self):
        assert isinstance(error_from_response(self._response(401, {"error": "X"})), AuthenticationError)
        assert isinstance(error_from_response(self._response(404, {"error": "X"})), NotFoundError)
        assert isinstance(error_from_response(self._response(502, {"error": "X"})), ExternalServiceError)
        assert isinstance(error_from_response(self._response(400, {"error": "X"})), ValidationError)

    def test_non_json_body(self):
        error = error_from_response(httpx.Response(500, text="Internal Server Error"))
        assert isinstance(error, ExternalServiceError)

    def test_typed_error_keeps_server_message_and_details(self):
        error = error_from_response(
            self._response(
                400,
                {"error": "CODE_EXPIRED", "message": "Code expired", "details": {"verificationId": "ver-1"}},
            )
        )
        assert isinstance(error, CodeExpiredError)
        assert error.message == "Code expired"
        assert str(error) == "Code expired"
        assert error.details == {"verificationId": "ver-1"}

    def test_typed_error_without_message_keeps_default(self):
        error = error_from_response(self._response(400, {"error": "INVALID_CODE"}))
        assert isinstance(error, InvalidCodeError)
        assert error.message == "Invalid verification code"
