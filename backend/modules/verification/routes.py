"""
Email verification endpoints.

POST /email-verification dispatches on the `action` field.
GET /email-verification/verify is the magic-link target and answers with
a redirect to the frontend.
"""

from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from api.dependencies import get_verification_service
from api.middleware.cors import resolve_client_origin
from api.middleware.shared_secret import require_shared_secret
from shared.config import get_settings
from shared.exceptions import ValidationError

from .interfaces import IVerificationService
from .models import MagicLinkOutcome, VerificationAction, VerificationRequest

router = APIRouter()


@router.post("/email-verification", dependencies=[Depends(require_shared_secret)])
async def email_verification(
    body: VerificationRequest,
    request: Request,
    service: IVerificationService = Depends(get_verification_service),
) -> dict:
    """
    Send, verify or check an email verification.

    Every action except verify-otp requires `email`.
    """
    if body.action != VerificationAction.VERIFY_OTP and not body.email:
        raise ValidationError("Email is required", code="EMAIL_REQUIRED")

    if body.action == VerificationAction.SEND_OTP:
        result = await service.send_otp(
            body.email,
            name=body.name,
            user_id=body.user_id,
            base_url=resolve_client_origin(request, get_settings()),
        )
    elif body.action == VerificationAction.VERIFY_OTP:
        result = await service.verify_otp(body.token, body.verification_id)
    elif body.action == VerificationAction.CHECK_VERIFICATION:
        result = await service.check_verification(body.email)
    else:
        result = await service.validate_email(body.email)

    return result.model_dump(by_alias=True)


@router.get("/email-verification/verify")
async def verify_magic_link(
    request: Request,
    token: str = Query(default=""),
    redirect: str = Query(default="/"),
    service: IVerificationService = Depends(get_verification_service),
) -> RedirectResponse:
    """Complete a verification from the emailed link and redirect to the frontend."""
    if not token:
        raise ValidationError("Missing token parameter", code="MISSING_TOKEN")

    base = resolve_client_origin(request, get_settings())
    outcome = await service.verify_magic_link(token)
    target = quote(redirect, safe="")

    if outcome == MagicLinkOutcome.VERIFIED:
        location = f"{base}/verification-success?redirect={target}"
    else:
        location = f"{base}/verification-failed?reason={outcome.value}&redirect={target}"
    return RedirectResponse(location, status_code=302)
