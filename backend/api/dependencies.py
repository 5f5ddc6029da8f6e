"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The verification backend is chosen here, once, from settings: the
Supabase-backed service in production, or the in-memory development
service that logs emails instead of sending them.
"""

import logging
import uuid
from typing import TYPE_CHECKING

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService, IUserRepository
    from modules.bookings.interfaces import IBookingService
    from modules.invites.interfaces import IInviteService
    from modules.password_reset.interfaces import IPasswordResetService
    from modules.preferences.interfaces import IFeatureFlagService
    from modules.verification.interfaces import IVerificationService
    from shared.email import IEmailSender

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: "Settings | None" = None) -> None:
        self._settings = settings
        self._users: "IUserRepository | None" = None
        self._email_sender: "IEmailSender | None" = None
        self._auth_service: "IAuthService | None" = None
        self._verification_service: "IVerificationService | None" = None
        self._password_reset_service: "IPasswordResetService | None" = None
        self._invite_service: "IInviteService | None" = None
        self._booking_service: "IBookingService | None" = None
        self._feature_flag_service: "IFeatureFlagService | None" = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def uses_memory_backend(self) -> bool:
        """
        Whether the development verification backend is selected.

        Raises:
            RuntimeError: If it is selected outside development mode
        """
        if self.settings.verification_backend != "memory":
            return False
        if not self.settings.is_development:
            raise RuntimeError(
                "The in-memory verification backend is only available in development. "
                "Set ENVIRONMENT=development or VERIFICATION_BACKEND=supabase."
            )
        return True

    @property
    def users(self) -> "IUserRepository":
        """Get the user repository instance."""
        if self._users is None:
            from modules.auth.repository import UserRepository
            from shared.database import get_supabase_client
            self._users = UserRepository(get_supabase_client())
        return self._users

    @property
    def email_sender(self) -> "IEmailSender":
        """Get the email sender (logging sender with the development backend)."""
        if self._email_sender is None:
            from shared.email import LoggingEmailSender, WebhookEmailSender
            if self.uses_memory_backend:
                self._email_sender = LoggingEmailSender()
            else:
                self._email_sender = WebhookEmailSender()
        return self._email_sender

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(users=self.users)
        return self._auth_service

    @property
    def verification(self) -> "IVerificationService":
        """Get the email verification service instance."""
        if self._verification_service is None:
            if self.uses_memory_backend:
                from modules.verification.repository import InMemoryVerificationRepository
                from modules.verification.service import DevelopmentVerificationService

                prefix = self.settings.dev_verification_prefix
                logger.warning("Using the in-memory development verification backend")
                self._verification_service = DevelopmentVerificationService(
                    verifications=InMemoryVerificationRepository(
                        id_factory=lambda: f"{prefix}{uuid.uuid4()}"
                    ),
                    users=self.users,
                    email_sender=self.email_sender,
                    settings=self.settings,
                )
            else:
                from modules.verification.repository import VerificationRepository
                from modules.verification.service import VerificationService
                from shared.database import get_supabase_client

                self._verification_service = VerificationService(
                    verifications=VerificationRepository(get_supabase_client()),
                    users=self.users,
                    email_sender=self.email_sender,
                    settings=self.settings,
                )
        return self._verification_service

    @property
    def password_reset(self) -> "IPasswordResetService":
        """Get the password reset service instance."""
        if self._password_reset_service is None:
            from modules.password_reset.repository import (
                ResetAttemptRepository,
                ResetTokenRepository,
            )
            from modules.password_reset.service import PasswordResetService
            from shared.database import get_supabase_client

            db = get_supabase_client()
            self._password_reset_service = PasswordResetService(
                tokens=ResetTokenRepository(db),
                attempts=ResetAttemptRepository(db),
                users=self.users,
                email_sender=self.email_sender,
                settings=self.settings,
            )
        return self._password_reset_service

    @property
    def invites(self) -> "IInviteService":
        """Get the invite service instance."""
        if self._invite_service is None:
            from modules.invites.repository import InviteRepository
            from modules.invites.service import InviteService
            from shared.database import get_supabase_client
            self._invite_service = InviteService(
                invites=InviteRepository(get_supabase_client()),
                users=self.users,
            )
        return self._invite_service

    @property
    def bookings(self) -> "IBookingService":
        """Get the booking service instance."""
        if self._booking_service is None:
            from modules.bookings.repository import BookingRepository
            from modules.bookings.service import BookingService
            from shared.database import get_supabase_client
            self._booking_service = BookingService(
                bookings=BookingRepository(get_supabase_client()),
                users=self.users,
            )
        return self._booking_service

    @property
    def feature_flags(self) -> "IFeatureFlagService":
        """Get the feature flag service instance."""
        if self._feature_flag_service is None:
            from modules.preferences.broadcaster import FlagBroadcaster
            from modules.preferences.repository import SupabaseFeatureFlagStore
            from modules.preferences.service import FeatureFlagService
            from shared.database import get_supabase_client
            self._feature_flag_service = FeatureFlagService(
                store=SupabaseFeatureFlagStore(get_supabase_client()),
                broadcaster=FlagBroadcaster(),
                defaults=self.settings.feature_flag_defaults,
            )
        return self._feature_flag_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._users = None
        self._email_sender = None
        self._auth_service = None
        self._verification_service = None
        self._password_reset_service = None
        self._invite_service = None
        self._booking_service = None
        self._feature_flag_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_verification_service() -> "IVerificationService":
    """FastAPI dependency for email verification service."""
    return get_container().verification


def get_password_reset_service() -> "IPasswordResetService":
    """FastAPI dependency for password reset service."""
    return get_container().password_reset


def get_invite_service() -> "IInviteService":
    """FastAPI dependency for invite service."""
    return get_container().invites


def get_booking_service() -> "IBookingService":
    """FastAPI dependency for booking service."""
    return get_container().bookings


def get_feature_flag_service() -> "IFeatureFlagService":
    """FastAPI dependency for feature flag service."""
    return get_container().feature_flags
