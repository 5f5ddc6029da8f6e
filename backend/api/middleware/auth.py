"""
JWT Authentication middleware.

Validates Supabase JWT tokens and extracts user information, including
the application role from the user_role claim.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from datetime import datetime, timezone

from modules.auth.exceptions import (
    ExpiredTokenError,
    InsufficientPermissionsError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.auth.models import JWTPayload, UserRole
from shared.config import get_settings
from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> JWTPayload:
    """
    Decode and validate a Supabase JWT token.

    Args:
        token: The JWT token string

    Returns:
        JWTPayload with decoded claims

    Raises:
        ExpiredTokenError: If the token has expired
        InvalidTokenError: If the token is invalid or auth is not configured
    """
    settings = get_settings()

    if not settings.supabase_jwt_secret:
        raise InvalidTokenError("Server authentication not configured")

    try:
        payload = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
        return JWTPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {str(e)}")


def get_user_from_payload(payload: JWTPayload) -> AuthenticatedUser:
    """
    Convert JWT payload to AuthenticatedUser model.

    Args:
        payload: Decoded JWT payload

    Returns:
        AuthenticatedUser instance
    """
    return AuthenticatedUser(
        id=payload.sub,
        email=payload.email,
        email_verified=payload.email_verified,
        last_sign_in=datetime.fromtimestamp(payload.iat, tz=timezone.utc),
        role=payload.application_role,
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if credentials is None:
        raise MissingTokenError("Missing authorization header")

    payload = decode_token(credentials.credentials)
    return get_user_from_payload(payload)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthenticatedUser]:
    """
    Dependency that optionally extracts user if authenticated.

    Use this for endpoints that work with or without authentication.
    """
    if credentials is None:
        return None

    try:
        payload = decode_token(credentials.credentials)
        return get_user_from_payload(payload)
    except AuthenticationError:
        return None


def require_role(*roles: UserRole):
    """
    Dependency factory restricting a route to the given roles.

    Usage:
        @router.get("/admin", dependencies=[Depends(require_role(UserRole.ADMIN))])
    """
    allowed = {role.value for role in roles}

    async def dependency(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in allowed:
            raise InsufficientPermissionsError(", ".join(sorted(allowed)), user.role)
        return user

    return dependency


# Type aliases for cleaner route definitions
RequireAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
