"""Tests for shared/validators.py."""

import pytest

from shared.exceptions import ValidationError
from shared.validators import (
    emails_match,
    is_valid_booking_reference,
    is_valid_email,
    is_valid_otp,
    normalize_email,
    normalize_otp,
    require_valid_email,
    suggest_email_correction,
    validate_password,
)


class TestEmail:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Foo%40Bar.COM ", "foo@bar.com"),
            ("  USER@Example.com", "user@example.com"),
            ("plain@example.com", "plain@example.com"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_email(self, raw, expected):
        assert normalize_email(raw) == expected

    def test_normalize_keeps_invalid_percent_sequences(self):
        assert normalize_email("a%ZZ@b.com") == "a%zz@b.com"

    @pytest.mark.parametrize("email", ["a@b.co", "first.last@example.org", "A%40B.COM"])
    def test_valid_emails(self, email):
        assert is_valid_email(email)

    @pytest.mark.parametrize("email", ["", None, "no-at-sign", "a@b", "a b@c.com", "@example.com"])
    def test_invalid_emails(self, email):
        assert not is_valid_email(email)

    def test_emails_match_is_case_insensitive(self):
        assert emails_match("Test@Example.com", "test%40example.com")
        assert not emails_match("a@example.com", "b@example.com")
        assert not emails_match(None, "a@example.com")

    @pytest.mark.parametrize(
        "email,suggestion",
        [
            ("maria@gmial.com", "maria@gmail.com"),
            ("maria@hotmal.com", "maria@hotmail.com"),
            ("maria@yahoo.con", "maria@yahoo.com"),
            ("maria@outlok.com", "maria@outlook.com"),
        ],
    )
    def test_suggests_common_domain_fixes(self, email, suggestion):
        assert suggest_email_correction(email) == suggestion

    def test_no_suggestion_for_correct_domain(self):
        assert suggest_email_correction("maria@gmail.com") is None
        assert suggest_email_correction("not-an-email") is None

    def test_require_valid_email(self):
        assert require_valid_email(" Maria@Example.com") == "maria@example.com"

    def test_require_valid_email_missing(self):
        with pytest.raises(ValidationError) as exc:
            require_valid_email("")
        assert exc.value.code == "EMAIL_REQUIRED"

    def test_require_valid_email_malformed(self):
        with pytest.raises(ValidationError) as exc:
            require_valid_email("nope")
        assert exc.value.code == "INVALID_EMAIL"


class TestCodes:
    @pytest.mark.parametrize("code", ["12a345", "07k314", " 12A345 "])
    def test_valid_otp(self, code):
        assert is_valid_otp(code)

    @pytest.mark.parametrize("code", ["123456", "12ab45", "1a2345", "12a34", "12a3456", "", None])
    def test_invalid_otp(self, code):
        assert not is_valid_otp(code)

    def test_normalize_otp(self):
        assert normalize_otp(" 12A345 ") == "12a345"
        assert normalize_otp(None) == ""

    @pytest.mark.parametrize("reference", ["1234a5", "0000z9"])
    def test_valid_booking_reference(self, reference):
        assert is_valid_booking_reference(reference)

    @pytest.mark.parametrize("reference", ["1234A5", "123a45", "12345a", "1234a56", "", None])
    def test_invalid_booking_reference(self, reference):
        assert not is_valid_booking_reference(reference)


class TestPassword:
    def test_accepts_min_length(self):
        validate_password("abcdef")

    @pytest.mark.parametrize("password", ["", None, "abc"])
    def test_rejects_short(self, password):
        with pytest.raises(ValidationError) as exc:
            validate_password(password)
        assert exc.value.code == "PASSWORD_TOO_SHORT"
        assert exc.value.details == {"min_length": 6}

    def test_custom_min_length(self):
        with pytest.raises(ValidationError):
            validate_password("abcdef", min_length=8)
