"""
Preferences module exceptions.
"""

from shared.exceptions import NotFoundError


class UnknownFeatureFlagError(NotFoundError):
    """Only flags with a configured default can be read or written."""

    def __init__(self, key: str):
        super().__init__(
            f"Unknown feature flag: {key}",
            code="UNKNOWN_FEATURE_FLAG",
            details={"key": key},
        )
