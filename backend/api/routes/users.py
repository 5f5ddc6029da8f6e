"""
User-related endpoints.

Provides endpoints for the signed-in user's profile.
"""

from fastapi import APIRouter, Depends

from modules.auth.exceptions import UserNotFoundError
from modules.auth.interfaces import IAuthService
from modules.auth.models import ProfileUpdate, UserProfile
from shared.models import AuthenticatedUser
from ..dependencies import get_auth_service
from ..middleware.auth import get_current_user

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    user: AuthenticatedUser = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> UserProfile:
    """
    Get the current user's profile.

    Requires authentication. Reads with the service role, so it works
    even when row-level policies on users are misconfigured.
    """
    profile = await auth.get_user_by_id(user.id)
    if profile is None:
        raise UserNotFoundError(user.id)
    return profile


@router.patch("/me", response_model=UserProfile)
async def update_current_user_profile(
    updates: ProfileUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> UserProfile:
    """Update name and phone of the current user."""
    return await auth.update_profile(user.id, updates)
