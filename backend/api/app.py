"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from modules.bookings.routes import router as bookings_router
from modules.invites.routes import router as invites_router
from modules.password_reset.routes import router as password_reset_router
from modules.preferences.routes import consent_router, flags_router
from modules.verification.routes import router as verification_router
from shared.config import get_settings as get_app_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    NotFoundError,
    RateLimitError,
    TransfersError,
    ValidationError,
)

from .config import get_settings
from .dependencies import get_container
from .middleware.cors import AllowListCORSMiddleware
from .routes import health, users

logger = logging.getLogger(__name__)

FUNCTIONS_PREFIX = "/functions/v1"

_STATUS_BY_ERROR: list[tuple[type[TransfersError], int]] = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (RateLimitError, 429),
    (ExternalServiceError, 502),
]


def status_for(error: TransfersError) -> int:
    """HTTP status for a typed error (400 for anything unmapped)."""
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    app_settings = get_app_settings()
    logger.info(
        f"Starting {app_settings.app_name} {app_settings.app_version} on "
        f"{settings.host}:{settings.port} "
        f"({'development' if app_settings.is_development else 'production'})"
    )
    # Raises when the development backend is configured in production.
    if get_container().uses_memory_backend:
        logger.warning("Verification emails are logged, not sent")
    yield
    # Shutdown
    logger.info(f"Shutting down {app_settings.app_name}")


async def transfers_error_handler(request: Request, exc: TransfersError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status} {exc.code}")

    headers = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after_seconds)
    return JSONResponse(status_code=status, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "INVALID_REQUEST",
            "message": "Invalid request body",
            "details": {"errors": jsonable_encoder(exc.errors())},
        },
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    app_settings = get_app_settings()

    app = FastAPI(
        title=app_settings.app_name,
        description="Accounts, email verification and password reset for the transfer booking site",
        version=app_settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(AllowListCORSMiddleware, allowed_origins=app_settings.allowed_origins)

    app.add_exception_handler(TransfersError, transfers_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Function endpoints called by the browser with the shared secret
    app.include_router(verification_router, prefix=FUNCTIONS_PREFIX, tags=["verification"])
    app.include_router(password_reset_router, prefix=FUNCTIONS_PREFIX, tags=["password-reset"])
    app.include_router(invites_router, prefix=FUNCTIONS_PREFIX, tags=["invites"])

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(bookings_router, prefix="/api/bookings", tags=["bookings"])
    app.include_router(consent_router, prefix="/api/consent", tags=["consent"])
    app.include_router(flags_router, prefix="/api/feature-flags", tags=["feature-flags"])

    return app


# Application instance for uvicorn
app = create_app()
