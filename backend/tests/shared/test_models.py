"""
Tests for shared models.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from shared.models import AuthenticatedUser


class TestAuthenticatedUser:
    def test_create_with_required_fields(self):
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        assert user.id == "user-123"
        assert user.email == "test@example.com"

    def test_default_values(self):
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        assert user.email_verified is False
        assert user.role == "customer"
        assert user.created_at is None
        assert user.last_sign_in is None
        assert user.is_admin is False

    def test_admin(self):
        now = datetime.now(timezone.utc)
        user = AuthenticatedUser(
            id="user-123",
            email="test@example.com",
            email_verified=True,
            last_sign_in=now,
            role="admin",
        )
        assert user.is_admin
        assert user.last_sign_in == now

    def test_email_validation(self):
        with pytest.raises(ValidationError):
            AuthenticatedUser(id="user-123", email="not-an-email")

    def test_immutability(self):
        user = AuthenticatedUser(id="user-123", email="test@example.com")
        with pytest.raises(ValidationError):
            user.id = "new-id"

    def test_extra_fields_ignored(self):
        user = AuthenticatedUser(
            id="user-123",
            email="test@example.com",
            extra_field="ignored",  # type: ignore
        )
        assert not hasattr(user, "extra_field")
