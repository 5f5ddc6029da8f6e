"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from shared.models import AuthenticatedUser  # noqa: F401  re-exported


class UserRole(str, Enum):
    """Roles stored in users.user_role and mirrored into the JWT."""

    CUSTOMER = "customer"
    PARTNER = "partner"
    SUPPORT = "support"
    ADMIN = "admin"


class JWTPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    This matches the structure of Supabase Auth JWTs, plus the
    user_role custom claim added by the access-token hook.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="Postgres role")
    email_confirmed_at: Optional[str] = Field(None, description="Email confirmation time")
    user_role: Optional[str] = Field(None, description="Application role claim")

    # Supabase-specific claims
    app_metadata: dict = Field(default_factory=dict)
    user_metadata: dict = Field(default_factory=dict)

    @property
    def application_role(self) -> str:
        """Application role from the custom claim, falling back to app metadata."""
        return (
            self.user_role
            or self.app_metadata.get("user_role")
            or UserRole.CUSTOMER.value
        )

    @property
    def email_verified(self) -> bool:
        if self.email_confirmed_at is not None:
            return True
        return bool(self.user_metadata.get("email_verified"))


class UserProfile(BaseModel):
    """
    Row of the public users table.

    The password hash is owned by the identity provider and never read here.
    """

    id: str = Field(..., description="User ID (UUID)")
    email: str = Field(..., description="Email address (normalized)")
    name: Optional[str] = Field(None, description="Full name")
    phone: Optional[str] = Field(None, description="Phone number")
    email_verified: bool = Field(default=False, description="Whether email is verified")
    role: str = Field(default=UserRole.CUSTOMER.value, description="Application role")
    created_at: Optional[datetime] = Field(None, description="Account creation time")


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AuthSession(BaseModel):
    """Signed-in session as held by the session manager."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user_id: str
    email: str
    email_verified: bool = False


class IdentityUser(BaseModel):
    """User created by the identity provider on sign-up."""

    id: str
    email: str
    session: Optional[AuthSession] = None


class SignUpResult(BaseModel):
    """Outcome of AuthSessionManager.sign_up."""

    user_id: str
    email: str
    role: str = UserRole.CUSTOMER.value
    verification_id: Optional[str] = None
    remaining_attempts: Optional[int] = None


class SignInResult(BaseModel):
    """Outcome of AuthSessionManager.sign_in."""

    session: AuthSession
    profile: Optional[UserProfile] = None
    requires_verification: bool = False
