"""
Fixtures for HTTP-level tests.

Each test gets a fresh application with every service wired to in-memory
repositories through dependency_overrides.
"""

import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import (
    get_auth_service,
    get_booking_service,
    get_feature_flag_service,
    get_invite_service,
    get_password_reset_service,
    get_verification_service,
)
from modules.auth.service import AuthService
from modules.bookings.models import Booking
from modules.bookings.repository import InMemoryBookingRepository
from modules.bookings.service import BookingService
from modules.invites.models import InviteLink
from modules.invites.repository import InMemoryInviteRepository
from modules.invites.service import InviteService
from modules.password_reset.repository import (
    InMemoryResetAttemptRepository,
    InMemoryResetTokenRepository,
)
from modules.password_reset.service import PasswordResetService
from modules.preferences.repository import InMemoryFeatureFlagStore
from modules.preferences.service import FeatureFlagService
from modules.verification.repository import InMemoryVerificationRepository
from modules.verification.service import VerificationService


@pytest.fixture
def verifications():
    return InMemoryVerificationRepository()


@pytest.fixture
def reset_tokens():
    return InMemoryResetTokenRepository()


@pytest.fixture
def invites(clock):
    repo = InMemoryInviteRepository()
    repo.add(InviteLink(id=str(uuid.uuid4()), code="PARTNER2025", role="partner", expires_at=clock() + timedelta(days=7)))
    return repo


@pytest.fixture
def bookings(clock, test_user_id):
    repo = InMemoryBookingRepository()
    repo.add(Booking(id="b-1", booking_reference="1234a5", user_id=test_user_id,
                     customer_email="test@example.com", pickup_datetime=clock() + timedelta(days=1)))
    repo.add(Booking(id="b-2", user_id=test_user_id, pickup_datetime=clock() - timedelta(days=1)))
    repo.add(Booking(id="b-other", user_id="someone-else", pickup_datetime=clock() + timedelta(days=1)))
    return repo


@pytest.fixture
def flag_service(settings):
    return FeatureFlagService(store=InMemoryFeatureFlagStore(), defaults=settings.feature_flag_defaults)


@pytest.fixture
def app(users, email_sender, settings, clock, verifications, reset_tokens, invites, bookings, flag_service):
    """Application with in-memory services."""
    application = create_app()
    auth = AuthService(users=users)
    verification = VerificationService(verifications, users, email_sender, settings=settings, clock=clock)
    password_reset = PasswordResetService(
        reset_tokens, InMemoryResetAttemptRepository(), users, email_sender, settings=settings, clock=clock
    )
    invite_service = InviteService(invites, users, clock=clock)
    booking_service = BookingService(bookings, users, clock=clock)

    application.dependency_overrides[get_auth_service] = lambda: auth
    application.dependency_overrides[get_verification_service] = lambda: verification
    application.dependency_overrides[get_password_reset_service] = lambda: password_reset
    application.dependency_overrides[get_invite_service] = lambda: invite_service
    application.dependency_overrides[get_booking_service] = lambda: booking_service
    application.dependency_overrides[get_feature_flag_service] = lambda: flag_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
