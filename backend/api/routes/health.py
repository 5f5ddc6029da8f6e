"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.config import get_settings
from shared.database import get_supabase_client

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    database: str
    email: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks that the database answers and the email webhook is configured.
    Returns 503 when either is missing.
    """
    settings = get_settings()

    database = "connected"
    try:
        get_supabase_client().table("users").select("id").limit(1).execute()
    except Exception as e:
        logger.warning(f"Readiness: database check failed: {e}")
        database = "unavailable"

    email = "configured" if settings.webhook_secret and settings.email_webhook_url else "unconfigured"

    ready = database == "connected" and email == "configured"
    body = ReadinessResponse(status="ready" if ready else "not_ready", database=database, email=email)
    if ready:
        return body
    return JSONResponse(status_code=503, content=body.model_dump())
