"""
Invite link module interfaces.
"""

from datetime import datetime
from typing import Optional, Protocol, runtime_checkable

from .models import InviteLink, InviteStatus, InviteValidation


@runtime_checkable
class IInviteRepository(Protocol):
    def get_active_by_code(self, code: str) -> Optional[InviteLink]:
        ...

    def set_status(self, invite_id: str, status: InviteStatus) -> None:
        ...

    def mark_used(self, invite_id: str, user_id: str, now: datetime) -> bool:
        """Conditional on status=active. Returns False if another sign-up got there first."""
        ...


@runtime_checkable
class IInviteService(Protocol):
    async def validate(self, code: str) -> InviteValidation:
        """
        Check an invite is active and unexpired.

        Raises:
            InvalidInviteError: Unknown or inactive code
            InviteExpiredError: Past expires_at (the invite is marked expired)
        """
        ...

    async def redeem(self, code: str, user_id: str) -> str:
        """
        Mark an invite used by a user and apply its role.

        Returns:
            The role granted by the invite
        """
        ...
