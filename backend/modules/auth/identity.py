"""
Identity provider adapter used by the session manager.

Wraps the Supabase Auth calls a signed-out browser makes with the public
anon key: sign-up, password sign-in, session refresh and sign-out. Errors
from the provider are translated into auth module exceptions here so the
session manager never sees provider-specific types.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from supabase import AuthError as SupabaseAuthError
from supabase import Client

from shared.database import get_supabase_anon_client
from shared.exceptions import ExternalServiceError

from .exceptions import AccountExistsError, InvalidCredentialsError, NotSignedInError
from .models import AuthSession, IdentityUser, UserProfile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@runtime_checkable
class IIdentityProvider(Protocol):
    """Client-side identity operations."""

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> IdentityUser:
        """
        Raises:
            AccountExistsError: If an account already exists for the email
        """
        ...

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Raises:
            InvalidCredentialsError: If the email/password pair is rejected
        """
        ...

    async def refresh_session(self) -> AuthSession:
        ...

    async def sign_out(self) -> None:
        ...

    async def query_profile(self, user_id: str) -> Optional[UserProfile]:
        """Read the users row directly with the signed-in user's permissions."""
        ...


def _to_session(session: Any) -> AuthSession:
    user = session.user
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user_id=str(user.id),
        email=user.email or "",
        email_verified=bool(
            getattr(user, "email_confirmed_at", None) or metadata.get("email_verified")
        ),
    )


class SupabaseIdentityProvider:
    """IIdentityProvider backed by a Supabase anon client."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client or get_supabase_anon_client()

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> IdentityUser:
        try:
            response = self._client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": metadata}}
            )
        except SupabaseAuthError as e:
            if "already registered" in str(e).lower():
                raise AccountExistsError(email) from e
            raise ExternalServiceError(str(e), service="supabase-auth", code="SIGNUP_FAILED") from e

        user = response.user
        if user is None:
            raise ExternalServiceError(
                "Sign-up returned no user", service="supabase-auth", code="SIGNUP_FAILED"
            )
        # With email confirmation enabled an existing address comes back as a
        # user with no identities instead of an error.
        if user.identities is not None and len(user.identities) == 0:
            raise AccountExistsError(email)

        return IdentityUser(
            id=str(user.id),
            email=user.email or email,
            session=_to_session(response.session) if response.session else None,
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except SupabaseAuthError as e:
            logger.info(f"Sign-in rejected: {e}")
            raise InvalidCredentialsError() from e

        if response.session is None:
            raise InvalidCredentialsError()
        return _to_session(response.session)

    async def refresh_session(self) -> AuthSession:
        response = self._client.auth.refresh_session()
        if response.session is None:
            raise NotSignedInError()
        return _to_session(response.session)

    async def sign_out(self) -> None:
        self._client.auth.sign_out()

    async def query_profile(self, user_id: str) -> Optional[UserProfile]:
        return UserRepository(self._client).get_by_id(user_id)
