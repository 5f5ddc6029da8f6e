"""
Input normalization and format validators shared by all modules.

These are pure functions so the session SDK can reject malformed input
without a network round trip and the server can re-check it.
"""

import logging
import re
from typing import Optional
from urllib.parse import unquote

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# One-time codes are 2 digits, 1 lowercase letter, 3 digits (e.g. "07k314").
OTP_PATTERN = re.compile(r"^\d{2}[a-z]\d{3}$")
OTP_LENGTH = 6

# Booking references are 4 digits, 1 lowercase letter, 1 digit (e.g. "1234a5").
BOOKING_REFERENCE_PATTERN = re.compile(r"^\d{4}[a-z]\d$")

COMMON_DOMAIN_TYPOS: dict[str, tuple[str, ...]] = {
    "gmail.com": (
        "gamil.com", "gmial.com", "gmaill.com", "gmail.co", "gmail.con",
        "gmail.cm", "gmail.cmo", "gmail.comm", "gmail.om", "gmal.com",
        "gmaik.com", "gmil.com", "gmaio.com", "gmil.co", "gma.com",
    ),
    "hotmail.com": (
        "hotmal.com", "hotmil.com", "hotmial.com", "hotmaill.com", "hotmail.co",
        "hotmail.con", "hotmail.cm", "hotmail.cmo", "hotmail.comm", "hotmai.com",
    ),
    "yahoo.com": (
        "yaho.com", "yhoo.com", "yaho.co", "yahoo.co", "yahoo.cm",
        "yahoo.cmo", "yahoo.con", "yahoo.comm", "yahho.com", "yahhoo.com",
    ),
    "outlook.com": (
        "outlok.com", "outllok.com", "otulook.com", "outloo.com", "outllook.com",
        "outloook.com", "outlok.co", "outlook.co", "outlook.cm", "outlook.cmo",
    ),
}


def normalize_email(email: Optional[str]) -> str:
    """
    Normalize an email address for storage and comparison.

    Decodes URL encoding (e.g. "%40"), trims whitespace and lowercases.

    Example:
        normalize_email("Foo%40Bar.COM ") == "foo@bar.com"
    """
    if not email:
        return ""

    decoded = email
    if "%" in email:
        try:
            decoded = unquote(email, errors="strict")
        except UnicodeDecodeError:
            logger.warning("Failed to URL-decode email address, using raw value")
            decoded = email

    return decoded.replace("%40", "@").strip().lower()


def is_valid_email(email: Optional[str]) -> bool:
    """Check the basic shape of an email address after normalization."""
    if not email:
        return False
    return EMAIL_PATTERN.match(normalize_email(email)) is not None


def emails_match(first: Optional[str], second: Optional[str]) -> bool:
    """Compare two addresses case-insensitively after normalization."""
    if not first or not second:
        return False
    return normalize_email(first) == normalize_email(second)


def suggest_email_correction(email: str) -> Optional[str]:
    """Return a corrected address when the domain is a known typo, else None."""
    local_part, _, domain = normalize_email(email).partition("@")
    if not domain:
        return None

    for correct_domain, typos in COMMON_DOMAIN_TYPOS.items():
        if domain in typos:
            return f"{local_part}@{correct_domain}"
    return None


def normalize_otp(code: Optional[str]) -> str:
    """Codes are compared case-insensitively."""
    return (code or "").strip().lower()


def is_valid_otp(code: Optional[str]) -> bool:
    """Check a one-time code against the fixed 00a000 format."""
    return OTP_PATTERN.match(normalize_otp(code)) is not None


def is_valid_booking_reference(reference: Optional[str]) -> bool:
    """Check a booking reference against the 0000a0 format (case-sensitive)."""
    if not reference:
        return False
    return BOOKING_REFERENCE_PATTERN.match(reference) is not None


def require_valid_email(email: Optional[str]) -> str:
    """Normalize an email or raise ValidationError."""
    if not email:
        raise ValidationError("Email is required", code="EMAIL_REQUIRED")
    if not is_valid_email(email):
        raise ValidationError(
            "Invalid email format",
            code="INVALID_EMAIL",
            details={"email": email},
        )
    return normalize_email(email)


def validate_password(password: Optional[str], min_length: int = 6) -> None:
    """
    Enforce the password length policy.

    Raises:
        ValidationError: If the password is missing or too short
    """
    if not password or len(password) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters long",
            code="PASSWORD_TOO_SHORT",
            details={"min_length": min_length},
        )
