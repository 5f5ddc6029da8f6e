"""
Consent and feature-flag endpoints.

Consent lives only in a cookie; nothing is persisted server-side.
"""

import asyncio
import json
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Request, Response
from sse_starlette.sse import EventSourceResponse

from api.dependencies import get_feature_flag_service
from api.middleware.auth import get_current_user
from shared.config import get_settings
from shared.models import AuthenticatedUser

from .models import (
    CONSENT_COOKIE_NAME,
    ConsentPreferences,
    ConsentState,
    ConsentUpdate,
    FeatureFlag,
    FeatureFlagsResponse,
    FeatureFlagUpdate,
)
from .service import FeatureFlagService

consent_router = APIRouter()
flags_router = APIRouter()

STREAM_POLL_SECONDS = 15.0


@consent_router.get("", response_model=ConsentState)
async def get_consent(
    consent: Optional[str] = Cookie(default=None, alias=CONSENT_COOKIE_NAME),
) -> ConsentState:
    """Current consent; defaults with has_consented=false when absent or unreadable."""
    preferences = ConsentPreferences.from_cookie(consent)
    if preferences is None:
        return ConsentState(has_consented=False, preferences=ConsentPreferences())
    return ConsentState(has_consented=True, preferences=preferences)


@consent_router.put("", response_model=ConsentState)
async def update_consent(update: ConsentUpdate, response: Response) -> ConsentState:
    settings = get_settings()
    preferences = update.to_preferences()
    response.set_cookie(
        CONSENT_COOKIE_NAME,
        preferences.to_cookie(),
        max_age=int(timedelta(days=settings.consent_cookie_max_age_days).total_seconds()),
        path="/",
        domain=settings.cookie_domain or None,
        samesite="lax",
        secure=not settings.is_development,
    )
    return ConsentState(has_consented=True, preferences=preferences)


@consent_router.delete("", status_code=204)
async def clear_consent(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(CONSENT_COOKIE_NAME, path="/", domain=settings.cookie_domain or None)


@flags_router.get("", response_model=FeatureFlagsResponse)
async def list_flags(
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlagsResponse:
    return FeatureFlagsResponse(flags=await service.all())


async def flag_event_generator(request: Request, service: FeatureFlagService):
    """
    Yield a snapshot, then one event per flag change.

    Event format:
        event: snapshot | flag_changed
        data: <json>
    """
    async with service.subscribe() as queue:
        yield {"event": "snapshot", "data": json.dumps(await service.all())}
        while not await request.is_disconnected():
            try:
                change = await asyncio.wait_for(queue.get(), timeout=STREAM_POLL_SECONDS)
            except asyncio.TimeoutError:
                continue
            yield {"event": "flag_changed", "data": change.model_dump_json()}


@flags_router.get("/stream")
async def stream_flags(
    request: Request,
    service: FeatureFlagService = Depends(get_feature_flag_service),
):
    """Server-sent flag changes, used to keep other tabs and subdomains in sync."""
    return EventSourceResponse(
        flag_event_generator(request, service),
        media_type="text/event-stream",
    )


@flags_router.get("/{key}", response_model=FeatureFlag)
async def get_flag(
    key: str,
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlag:
    return FeatureFlag(key=key, enabled=await service.get(key))


@flags_router.put("/{key}", response_model=FeatureFlag)
async def set_flag(
    key: str,
    update: FeatureFlagUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    service: FeatureFlagService = Depends(get_feature_flag_service),
) -> FeatureFlag:
    """Set a flag. Admin only."""
    return await service.set(key, update.enabled, user)
