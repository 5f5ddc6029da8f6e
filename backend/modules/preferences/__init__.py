"""
Preferences module.

Cookie consent and the feature-flag configuration service.
"""

from .interfaces import IFeatureFlagService, IFeatureFlagStore
from .models import ConsentPreferences, FeatureFlag, FlagChange, CONSENT_COOKIE_NAME
from .exceptions import UnknownFeatureFlagError

__all__ = [
    "IFeatureFlagService",
    "IFeatureFlagStore",
    "ConsentPreferences",
    "FeatureFlag",
    "FlagChange",
    "CONSENT_COOKIE_NAME",
    "UnknownFeatureFlagError",
]
