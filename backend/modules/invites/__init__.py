"""
Invite links module.

Role-granting invite codes used during sign-up.
"""

from .interfaces import IInviteService
from .models import InviteLink, InviteStatus, InviteValidation
from .exceptions import InvalidInviteError, InviteExpiredError

__all__ = [
    "IInviteService",
    "InviteLink",
    "InviteStatus",
    "InviteValidation",
    "InvalidInviteError",
    "InviteExpiredError",
]
