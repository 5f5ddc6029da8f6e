"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    TransfersError,
    ValidationError,
)
from shared.retry import ErrorKind


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when the identity provider rejects an email/password pair."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class NotSignedInError(AuthenticationError):
    """Raised when an operation needs a session and there is none."""

    def __init__(self):
        super().__init__("User not authenticated", code="NOT_SIGNED_IN")


class AccountExistsError(ValidationError):
    """
    Raised on sign-up when an account already exists for the email.

    Sign-up deliberately discloses existing accounts so the UI can offer
    the "Existing Account Found" prompt.
    """

    def __init__(self, email: str):
        super().__init__(
            "Existing Account Found",
            code="ACCOUNT_EXISTS",
            details={"email": email},
        )


class UserNotFoundError(NotFoundError):
    """Raised when the authenticated user doesn't exist in the database."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )


class ProfileFetchError(TransfersError):
    """Raised when neither the privileged lookup nor the direct query returned a profile."""

    def __init__(self, user_id: str, kind: ErrorKind, message: str):
        super().__init__(
            message,
            code="PROFILE_FETCH_FAILED",
            details={"user_id": user_id, "kind": kind.value},
        )
        self.kind = kind


class InsufficientPermissionsError(AuthorizationError):
    """Raised when user lacks required permissions."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )
