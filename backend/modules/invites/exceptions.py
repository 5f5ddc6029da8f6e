"""
Invite link exceptions.
"""

from shared.exceptions import ValidationError


class InvalidInviteError(ValidationError):
    """Unknown code, or an invite that is no longer active."""

    def __init__(self, code: str = ""):
        super().__init__(
            "Invalid or expired invite code",
            code="INVALID_INVITE",
            details={"code": code} if code else {},
        )


class InviteExpiredError(ValidationError):
    def __init__(self, code: str = ""):
        super().__init__(
            "This invite link has expired",
            code="INVITE_EXPIRED",
            details={"code": code} if code else {},
        )
