"""
Centralized configuration for the Transfers backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings are namespaced by prefix (e.g., OTP_*, RESET_*, SUPABASE_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Transfers API"
    app_version: str = "0.1.0"
    environment: Literal["production", "development"] = "production"
    log_level: str = "INFO"

    # Hostname the deployment is served from. Matching one of the dev
    # markers switches the process into development mode at startup.
    public_hostname: str = ""
    dev_hostnames: list[str] = ["localhost", "local-credentialless", "webcontainer"]

    # CORS allow-list. The first entry is returned for unlisted origins.
    allowed_origins: list[str] = [
        "https://royaltransfereu.com",
        "https://www.royaltransfereu.com",
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""

    # Shared secret expected in the X-Auth header of function calls,
    # also sent to the email webhook.
    webhook_secret: str = ""
    email_webhook_url: str = "https://n8n.capohq.com/webhook/rteu-tx-email"
    email_timeout_seconds: float = 10.0

    # Base URL the session SDK uses to reach this backend
    api_base_url: str = "http://localhost:8000"

    # Frontend URLs (for links in emails and redirects)
    frontend_url: str = "https://royaltransfereu.com"

    # Verification backend: "supabase" in production, "memory" for local testing
    verification_backend: Literal["supabase", "memory"] = "supabase"
    dev_verification_prefix: str = "dev-"

    # OTP policy
    otp_expiry_minutes: int = 15
    otp_min_resend_interval_seconds: int = 60
    otp_send_limit_per_hour: int = 5
    otp_pending_window_minutes: int = 5

    # Password reset policy
    reset_token_ttl_minutes: int = 60
    reset_request_limit_per_hour: int = 3
    password_min_length: int = 6

    # Retry policy for profile and booking fetches
    retry_max_attempts: int = 3
    retry_initial_delay: float = 1.0
    retry_max_delay: float = 10.0
    retry_backoff_factor: float = 2.0
    retry_jitter: float = 0.1
    retry_timeout: float = 30.0

    # Seconds to wait before redirecting to the login page after an access error
    auth_redirect_delay: float = 2.0

    # Cookies
    cookie_domain: str = ""
    consent_cookie_max_age_days: int = 365

    # Feature flags (defaults; overridden by the shared flag store)
    feature_flag_defaults: dict[str, bool] = {
        "show_cookie_banner": True,
        "show_booking_reference_form": True,
        "enable_partner_signup": False,
    }

    @property
    def is_development(self) -> bool:
        """Whether the process runs in development mode."""
        if self.environment == "development":
            return True
        host = self.public_hostname.lower()
        if not host:
            return False
        return host == "localhost" or any(
            marker in host for marker in self.dev_hostnames if marker != "localhost"
        )

    @property
    def default_origin(self) -> str:
        """Origin returned to callers that are not on the allow-list."""
        return self.allowed_origins[0] if self.allowed_origins else self.frontend_url


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
