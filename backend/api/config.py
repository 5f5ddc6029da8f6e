"""
API server configuration using Pydantic Settings.

Only process-level options live here; application settings (Supabase,
webhook, OTP and reset policy, CORS allow-list) are in shared.config.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """API server settings, read from TRANSFERS_* variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRANSFERS_",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    reload: bool = False

    # Direct Postgres connection used by run_migrations.py
    supabase_db_url: str = ""


@lru_cache
def get_settings() -> APISettings:
    """Get cached settings instance."""
    return APISettings()
