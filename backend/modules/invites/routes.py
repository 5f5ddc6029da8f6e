"""
Invite link endpoints.

GET validates a code for the sign-up form; POST redeems it for a new user.
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_invite_service
from api.middleware.shared_secret import require_shared_secret
from shared.exceptions import ValidationError

from .interfaces import IInviteService
from .models import RedeemInviteRequest, RedeemInviteResult

router = APIRouter()


@router.get("/validate-invite")
async def validate_invite(
    code: str = Query(default=""),
    service: IInviteService = Depends(get_invite_service),
) -> dict:
    if not code:
        raise ValidationError("Missing invite code parameter", code="INVITE_CODE_REQUIRED")
    return (await service.validate(code)).model_dump(by_alias=True, mode="json")


@router.post("/validate-invite", dependencies=[Depends(require_shared_secret)])
async def redeem_invite(
    body: RedeemInviteRequest,
    service: IInviteService = Depends(get_invite_service),
) -> dict:
    if not body.code or not body.user_id:
        raise ValidationError("Missing required parameters", code="MISSING_FIELDS")
    role = await service.redeem(body.code, body.user_id)
    return RedeemInviteResult(role=role).model_dump()
