"""Tests for shared/exceptions.py."""

import pytest

from shared.exceptions import (
    TransfersError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ExternalServiceError,
)


class TestTransfersError:
    def test_basic_error(self):
        error = TransfersError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.code == "TransfersError"
        assert error.details == {}

    def test_error_with_code_and_details(self):
        error = TransfersError("Bad input", code="BAD_INPUT", details={"field": "email"})
        assert error.code == "BAD_INPUT"
        assert error.details == {"field": "email"}

    def test_to_dict(self):
        error = TransfersError("Test error", code="TEST_CODE", details={"key": "value"})
        assert error.to_dict() == {
            "error": "TEST_CODE",
            "message": "Test error",
            "details": {"key": "value"},
        }

    @pytest.mark.parametrize(
        "cls", [NotFoundError, ValidationError, AuthenticationError, AuthorizationError]
    )
    def test_subclasses_use_class_name_as_default_code(self, cls):
        error = cls("message")
        assert isinstance(error, TransfersError)
        assert error.code == cls.__name__


class TestRateLimitError:
    def test_retry_after_in_details(self):
        error = RateLimitError("Too many attempts", retry_after_seconds=42)
        assert error.code == "RATE_LIMITED"
        assert error.retry_after_seconds == 42
        assert error.to_dict()["details"]["retryAfterSeconds"] == 42

    def test_retry_after_is_at_least_one_second(self):
        assert RateLimitError("x", retry_after_seconds=-5).retry_after_seconds == 1

    def test_zero_retry_after_is_clamped(self):
        assert RateLimitError("x", retry_after_seconds=0.4).retry_after_seconds == 1

    def test_fractional_retry_after_is_truncated(self):
        assert RateLimitError("x", retry_after_seconds=12.9).retry_after_seconds == 12


class TestExternalServiceError:
    def test_service_recorded(self):
        error = ExternalServiceError("Webhook down", service="email-webhook", code="EMAIL_DELIVERY_FAILED")
        assert error.service == "email-webhook"
        assert error.details["service"] == "email-webhook"
        assert error.code == "EMAIL_DELIVERY_FAILED"
