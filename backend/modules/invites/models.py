"""
Invite link data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class InviteStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class InviteLink(BaseModel):
    """A pre-provisioned code granting a role at sign-up."""

    id: str
    code: str
    role: str
    status: InviteStatus = InviteStatus.ACTIVE
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None
    used_at: Optional[datetime] = None
    used_by: Optional[str] = None
    note: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now


class InviteValidation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool = True
    invite_id: str = Field(..., alias="inviteId")
    role: str
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")


class RedeemInviteRequest(BaseModel):
    """Body of POST /validate-invite."""

    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")


class RedeemInviteResult(BaseModel):
    success: bool = True
    role: str
