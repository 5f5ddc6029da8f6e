"""
Password reset endpoints.

All three require the X-Auth shared secret.
"""

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_password_reset_service
from api.middleware.cors import allowed_origin_of
from api.middleware.shared_secret import require_shared_secret
from shared.config import get_settings
from shared.email import EmailType
from shared.exceptions import ValidationError

from .exceptions import UnsupportedEmailTypeError
from .interfaces import IPasswordResetService
from .models import (
    ClientInfo,
    EmailWebhookRequest,
    ResetPasswordRequest,
    TokenAction,
    VerifyResetTokenRequest,
)

router = APIRouter(dependencies=[Depends(require_shared_secret)])


def _client_info(request: Request) -> ClientInfo:
    return ClientInfo(
        ip_address=request.client.host if request.client else None,
        user_agent=(request.headers.get("user-agent") or "")[:512] or None,
    )


@router.post("/email-webhook")
async def email_webhook(
    body: EmailWebhookRequest,
    request: Request,
    service: IPasswordResetService = Depends(get_password_reset_service),
) -> dict:
    """
    Send a transactional email. Only password reset (PWReset) is handled here.

    The reset link in the email is built server-side; only the origin of
    the supplied reset_link is used, and only when it is allow-listed.
    """
    if not body.email:
        raise ValidationError("Email is required", code="EMAIL_REQUIRED")
    if body.email_type != EmailType.PASSWORD_RESET.value:
        raise UnsupportedEmailTypeError(body.email_type)

    result = await service.request_reset(
        body.email,
        base_url=allowed_origin_of(body.reset_link, get_settings()),
        client=_client_info(request),
    )
    return result.model_dump()


@router.post("/verify-reset-token")
async def verify_reset_token(
    body: VerifyResetTokenRequest,
    service: IPasswordResetService = Depends(get_password_reset_service),
) -> dict:
    """Verify (no mutation) or consume (single use) a reset token."""
    if not body.token:
        raise ValidationError("Token parameter is required", code="TOKEN_REQUIRED")

    if body.action == TokenAction.CONSUME:
        return (await service.consume_token(body.token)).model_dump()
    return (await service.verify_token(body.token)).model_dump()


@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    service: IPasswordResetService = Depends(get_password_reset_service),
) -> dict:
    """Set a new password with a valid, unused token issued for the same email."""
    if not body.email or not body.password or not body.token:
        raise ValidationError(
            "Email, password, and token are required",
            code="MISSING_FIELDS",
        )

    result = await service.reset_password(
        body.email,
        body.password,
        body.token,
        client=_client_info(request),
    )
    return result.model_dump()
