"""
Authentication module.

Handles JWT validation, user profiles, the identity provider and the
client-side session manager.

Public API:
- IAuthService: Interface for auth operations
- IUserRepository: Interface for the users table
- AuthenticatedUser: Minimal user info from JWT
- UserProfile, ProfileUpdate: Stored profile and the fields a user may change
- Auth exceptions: InvalidTokenError, ExpiredTokenError, etc.

The session manager and backend client live in modules.auth.session and
modules.auth.client; they are not re-exported here because they import
the other modules' models.
"""

from .interfaces import IAuthService, IUserRepository
from .models import (
    AuthenticatedUser,
    JWTPayload,
    ProfileUpdate,
    UserProfile,
    UserRole,
)
from .exceptions import (
    AccountExistsError,
    ExpiredTokenError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    ProfileFetchError,
    UserNotFoundError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IUserRepository",
    # Models
    "AuthenticatedUser",
    "JWTPayload",
    "ProfileUpdate",
    "UserProfile",
    "UserRole",
    # Exceptions
    "AccountExistsError",
    "ExpiredTokenError",
    "InsufficientPermissionsError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "MissingTokenError",
    "ProfileFetchError",
    "UserNotFoundError",
]
