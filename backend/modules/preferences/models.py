"""
Consent and feature-flag data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from urllib.parse import quote, unquote
from pydantic import BaseModel, Field, field_validator

from shared.clock import utc_now

CONSENT_COOKIE_NAME = "royal_transfer_cookie_consent"


class ConsentPreferences(BaseModel):
    """
    Cookie consent choices.

    Necessary cookies cannot be declined; the flag is forced to True.
    """

    necessary: bool = True
    analytics: bool = False
    marketing: bool = False
    preferences: bool = False

    @field_validator("necessary", mode="before")
    @classmethod
    def _always_necessary(cls, value):
        return True

    @classmethod
    def accept_all(cls) -> "ConsentPreferences":
        return cls(analytics=True, marketing=True, preferences=True)

    @classmethod
    def reject_all(cls) -> "ConsentPreferences":
        return cls()

    def to_cookie(self) -> str:
        return quote(self.model_dump_json(), safe="")

    @classmethod
    def from_cookie(cls, value: Optional[str]) -> Optional["ConsentPreferences"]:
        """Parse a consent cookie; malformed values count as no consent."""
        if not value:
            return None
        try:
            return cls.model_validate_json(unquote(value))
        except ValueError:
            return None


class ConsentMode(str, Enum):
    ACCEPT_ALL = "accept_all"
    NECESSARY_ONLY = "necessary_only"
    CUSTOM = "custom"


class ConsentUpdate(BaseModel):
    """Body of PUT /api/consent."""

    mode: ConsentMode = ConsentMode.CUSTOM
    analytics: bool = False
    marketing: bool = False
    preferences: bool = False

    def to_preferences(self) -> ConsentPreferences:
        if self.mode == ConsentMode.ACCEPT_ALL:
            return ConsentPreferences.accept_all()
        if self.mode == ConsentMode.NECESSARY_ONLY:
            return ConsentPreferences.reject_all()
        return ConsentPreferences(
            analytics=self.analytics,
            marketing=self.marketing,
            preferences=self.preferences,
        )


class ConsentState(BaseModel):
    has_consented: bool
    preferences: ConsentPreferences


class FeatureFlag(BaseModel):
    key: str
    enabled: bool
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


class FeatureFlagUpdate(BaseModel):
    enabled: bool


class FeatureFlagsResponse(BaseModel):
    flags: dict[str, bool]


class FlagChange(BaseModel):
    """Published to subscribers whenever a flag is written."""

    key: str
    enabled: bool
    changed_at: datetime = Field(default_factory=utc_now)
