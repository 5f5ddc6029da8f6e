"""
Transfers API package.

Provides the FastAPI application for accounts, email verification and
password reset of the transfer booking site.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
