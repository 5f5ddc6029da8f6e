"""
Authentication module interface.

Other modules should depend on IAuthService and IUserRepository, not the
concrete implementations. This enables testing with in-memory fakes.
"""

from typing import Protocol, Optional, runtime_checkable

from .models import AuthenticatedUser, ProfileUpdate, UserProfile


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to other modules. Implementations must provide all these methods.
    """

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        Args:
            token: JWT access token from Supabase Auth

        Returns:
            AuthenticatedUser with user ID, email and application role

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...

    async def get_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        """
        Get a user's profile by their ID.

        Args:
            user_id: Supabase user ID (UUID)

        Returns:
            UserProfile if found, None otherwise
        """
        ...

    async def get_user_by_email(self, email: str) -> Optional[UserProfile]:
        """
        Get a user's profile by their email.

        Args:
            email: User's email address (any case, URL-encoded allowed)

        Returns:
            UserProfile if found, None otherwise
        """
        ...

    async def update_profile(self, user_id: str, updates: ProfileUpdate) -> UserProfile:
        """
        Update the editable profile fields of a user.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Storage of user profiles and the identity-provider side of a user."""

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        ...

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Case-insensitive lookup by email."""
        ...

    def update_profile(self, user_id: str, fields: dict) -> Optional[UserProfile]:
        ...

    def set_email_verified(self, user_id: str) -> None:
        """Set users.email_verified = true."""
        ...

    def sync_auth_email_verified(self, user_id: str) -> None:
        """Mirror email_verified into the identity provider's user metadata."""
        ...

    def update_password(self, user_id: str, password: str) -> None:
        """Set a new password through the identity provider's admin API."""
        ...
