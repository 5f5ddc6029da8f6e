"""
Authentication service implementation.

Validates Supabase JWT tokens and provides user profile lookups.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
import jwt

from shared.config import get_settings
from shared.database import get_supabase_client
from shared.models import AuthenticatedUser

from .interfaces import IAuthService, IUserRepository
from .models import ProfileUpdate, UserProfile, JWTPayload
from .repository import UserRepository
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Uses Supabase JWT tokens for authentication and the users table
    for profile storage.
    """

    def __init__(self, users: Optional[IUserRepository] = None):
        self._settings = get_settings()
        self._users = users if users is not None else UserRepository(get_supabase_client())

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        This implementation validates Supabase JWTs using the JWT secret.
        The application role comes from the user_role claim set by the
        access-token hook, falling back to app metadata.
        """
        if not token:
            raise MissingTokenError()

        try:
            # Decode and validate the JWT
            payload = jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )

            jwt_payload = JWTPayload(**payload)

            # Convert iat timestamp to datetime for last_sign_in
            last_sign_in = datetime.fromtimestamp(jwt_payload.iat, tz=timezone.utc)

            return AuthenticatedUser(
                id=jwt_payload.sub,
                email=jwt_payload.email or "",
                email_verified=jwt_payload.email_verified,
                last_sign_in=last_sign_in,
                role=jwt_payload.application_role,
            )

        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e))

    async def get_user_by_id(self, user_id: str) -> Optional[UserProfile]:
        """Get a user's profile from the users table (service role)."""
        return self._users.get_by_id(user_id)

    async def get_user_by_email(self, email: str) -> Optional[UserProfile]:
        """Get a user's profile by normalized email."""
        return self._users.get_by_email(email)

    async def update_profile(self, user_id: str, updates: ProfileUpdate) -> UserProfile:
        profile = self._users.update_profile(user_id, updates.to_row())
        if profile is None:
            raise UserNotFoundError(user_id)
        logger.info(f"Updated profile for user {user_id}")
        return profile

