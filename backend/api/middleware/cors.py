"""
Allow-list CORS handling.

Listed origins are echoed back with credentials allowed. Any other origin
gets the default origin in Access-Control-Allow-Origin, so browsers refuse
credentialed cross-origin use without the request being rejected outright.
"""

from typing import Optional, Sequence
from urllib.parse import urlparse

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shared.config import Settings

DEFAULT_ALLOW_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
DEFAULT_ALLOW_HEADERS = ("authorization", "x-client-info", "apikey", "content-type", "x-auth")


def origin_of(url: Optional[str]) -> Optional[str]:
    """scheme://host[:port] of a URL, or None if it has no host."""
    if not url:
        return None
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def allowed_origin_of(url: Optional[str], settings: Settings) -> Optional[str]:
    """Origin of the URL when it is on the allow-list."""
    origin = origin_of(url)
    return origin if origin in settings.allowed_origins else None


def resolve_client_origin(request: Request, settings: Settings) -> str:
    """
    Base URL for links and redirects sent back to the browser.

    Uses the Origin header, then the Referer, and falls back to the
    configured frontend URL when neither is allow-listed.
    """
    for candidate in (request.headers.get("origin"), request.headers.get("referer")):
        origin = allowed_origin_of(candidate, settings)
        if origin:
            return origin
    return settings.frontend_url.rstrip("/")


class AllowListCORSMiddleware(BaseHTTPMiddleware):
    """CORS middleware that never reflects an unlisted origin."""

    def __init__(
        self,
        app,
        allowed_origins: Sequence[str],
        allow_methods: Sequence[str] = DEFAULT_ALLOW_METHODS,
        allow_headers: Sequence[str] = DEFAULT_ALLOW_HEADERS,
        max_age: int = 86400,
    ):
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)
        self.allow_methods = ", ".join(allow_methods)
        self.allow_headers = ", ".join(allow_headers)
        self.max_age = str(max_age)

    def allow_origin_for(self, origin: Optional[str]) -> str:
        if origin and origin in self.allowed_origins:
            return origin
        return self.allowed_origins[0] if self.allowed_origins else ""

    def cors_headers(self, origin: Optional[str]) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin_for(origin),
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Allow-Methods": self.allow_methods,
            "Access-Control-Allow-Headers": self.allow_headers,
            "Access-Control-Max-Age": self.max_age,
            "Vary": "Origin",
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        headers = self.cors_headers(request.headers.get("origin"))

        if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
            return Response(status_code=204, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
