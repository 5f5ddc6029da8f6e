"""
Preferences module interfaces.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser

from .models import FeatureFlag


@runtime_checkable
class IFeatureFlagStore(Protocol):
    """
    Shared flag storage.

    This is the trust boundary for flags shared across subdomains: only the
    backend writes to it, and only after the service checked the key and
    the caller's role.
    """

    def load_all(self) -> dict[str, bool]:
        ...

    def save(self, key: str, enabled: bool, updated_by: Optional[str] = None) -> FeatureFlag:
        ...


@runtime_checkable
class IFeatureFlagService(Protocol):
    async def all(self) -> dict[str, bool]:
        """Every known flag, stored values over configured defaults."""
        ...

    async def get(self, key: str) -> bool:
        """
        Raises:
            UnknownFeatureFlagError: If the key has no configured default
        """
        ...

    async def set(self, key: str, enabled: bool, actor: AuthenticatedUser) -> FeatureFlag:
        """
        Raises:
            UnknownFeatureFlagError: If the key has no configured default
            InsufficientPermissionsError: If the actor isn't an admin
        """
        ...
