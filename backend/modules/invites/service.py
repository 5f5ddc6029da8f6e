"""
Invite link service.

Validates invite codes for sign-up and redeems them once the account exists.
"""

import logging
from typing import Optional

from shared.clock import Clock, utc_now
from modules.auth.interfaces import IUserRepository

from .exceptions import InvalidInviteError, InviteExpiredError
from .interfaces import IInviteRepository, IInviteService
from .models import InviteLink, InviteStatus, InviteValidation

logger = logging.getLogger(__name__)


class InviteService(IInviteService):
    def __init__(
        self,
        invites: IInviteRepository,
        users: IUserRepository,
        clock: Clock = utc_now,
    ):
        self._invites = invites
        self._users = users
        self._clock = clock

    def _load_active(self, code: Optional[str]) -> InviteLink:
        code = (code or "").strip()
        if not code:
            raise InvalidInviteError()

        invite = self._invites.get_active_by_code(code)
        if invite is None:
            raise InvalidInviteError(code)

        if invite.is_expired(self._clock()):
            self._invites.set_status(invite.id, InviteStatus.EXPIRED)
            logger.info(f"Invite {invite.id} expired")
            raise InviteExpiredError(code)
        return invite

    async def validate(self, code: str) -> InviteValidation:
        invite = self._load_active(code)
        return InviteValidation(invite_id=invite.id, role=invite.role, expires_at=invite.expires_at)

    async def redeem(self, code: str, user_id: str) -> str:
        invite = self._load_active(code)
        if not self._invites.mark_used(invite.id, user_id, self._clock()):
            raise InvalidInviteError(invite.code)
        logger.info(f"Invite {invite.id} used by {user_id}")

        if invite.role:
            try:
                self._users.update_profile(user_id, {"user_role": invite.role})
            except Exception as e:
                logger.error(f"Error applying invite role to {user_id}: {e}")
        return invite.role
