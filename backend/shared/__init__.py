"""
Shared infrastructure for the Transfers backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- validators: Email, one-time code and booking reference formats
- retry: Error classification and bounded retry
- email: Transactional email dispatch

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import (
    get_supabase_client,
    get_supabase_anon_client,
    get_supabase_user_client,
    reset_client_cache,
)
from .exceptions import (
    TransfersError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ExternalServiceError,
)
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_supabase_anon_client",
    "get_supabase_user_client",
    "reset_client_cache",
    "TransfersError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ExternalServiceError",
    "AuthenticatedUser",
]
