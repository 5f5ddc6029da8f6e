"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest
from datetime import datetime, timezone, timedelta
from typing import Optional
import jwt  # PyJWT

from api.dependencies import reset_container
from modules.auth.repository import InMemoryUserRepository
from shared.config import get_settings
from shared.email import LoggingEmailSender


# Test secrets (only for testing)
TEST_JWT_SECRET = "test-secret-key-for-testing-only"
TEST_WEBHOOK_SECRET = "test-webhook-secret"


def create_test_token(
    user_id: str = "test-user-123",
    email: str = "test@example.com",
    expired: bool = False,
    email_verified: bool = True,
    role: Optional[str] = None,
) -> str:
    """
    Create a test JWT token for authentication.

    Args:
        user_id: User ID to include in the token
        email: Email to include in the token
        expired: If True, creates an expired token
        email_verified: Whether the email should be marked as verified
        role: Value of the user_role claim, omitted when None

    Returns:
        JWT token string
    """
    now = datetime.now(timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload = {
        "sub": user_id,
        "email": email,
        "email_confirmed_at": now.isoformat() if email_verified else None,
        "aud": "authenticated",
        "role": "authenticated",
        "exp": int(exp.timestamp()),
        "iat": int(now.timestamp()),
    }
    if role is not None:
        payload["user_role"] = role
    return jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")


class FakeClock:
    """Controllable time source for services that take a clock."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Known secrets and fresh singletons for every test."""
    monkeypatch.setenv("SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("WEBHOOK_SECRET", TEST_WEBHOOK_SECRET)
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("VERIFICATION_BACKEND", "supabase")
    get_settings.cache_clear()
    reset_container()
    yield
    get_settings.cache_clear()
    reset_container()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-123"


@pytest.fixture
def test_user_email() -> str:
    """Provide a consistent test user email."""
    return "test@example.com"


@pytest.fixture
def users(test_user_id: str, test_user_email: str) -> InMemoryUserRepository:
    """User store holding one unverified customer."""
    repo = InMemoryUserRepository()
    repo.add(test_user_id, test_user_email, name="Test User")
    return repo


@pytest.fixture
def email_sender() -> LoggingEmailSender:
    return LoggingEmailSender()


@pytest.fixture
def auth_token(test_user_id: str, test_user_email: str) -> str:
    """Create a valid auth token for testing."""
    return create_test_token(user_id=test_user_id, email=test_user_email)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers with a valid token."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def make_token():
    """Factory fixture for tokens with custom claims."""
    return create_test_token


@pytest.fixture
def secret_headers() -> dict[str, str]:
    """Headers carrying the shared secret for function endpoints."""
    return {"X-Auth": TEST_WEBHOOK_SECRET}
