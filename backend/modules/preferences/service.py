"""
Feature flag service.

Typed get/set over the shared store, with changes fanned out through the
broadcaster. Unknown keys are rejected in both directions.
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Optional

from shared.config import get_settings
from shared.models import AuthenticatedUser
from modules.auth.exceptions import InsufficientPermissionsError
from modules.auth.models import UserRole

from .broadcaster import FlagBroadcaster
from .exceptions import UnknownFeatureFlagError
from .interfaces import IFeatureFlagService, IFeatureFlagStore
from .models import FeatureFlag, FlagChange

logger = logging.getLogger(__name__)


class FeatureFlagService(IFeatureFlagService):
    def __init__(
        self,
        store: IFeatureFlagStore,
        broadcaster: Optional[FlagBroadcaster] = None,
        defaults: Optional[dict[str, bool]] = None,
    ):
        self._store = store
        self._broadcaster = broadcaster or FlagBroadcaster()
        self._defaults = dict(defaults if defaults is not None else get_settings().feature_flag_defaults)

    @property
    def known_keys(self) -> frozenset[str]:
        return frozenset(self._defaults)

    def _require_known(self, key: str) -> None:
        if key not in self._defaults:
            raise UnknownFeatureFlagError(key)

    async def all(self) -> dict[str, bool]:
        stored = self._store.load_all()
        flags = dict(self._defaults)
        # Stray keys in the store are ignored
        flags.update({key: value for key, value in stored.items() if key in self._defaults})
        return flags

    async def get(self, key: str) -> bool:
        self._require_known(key)
        return (await self.all())[key]

    async def set(self, key: str, enabled: bool, actor: AuthenticatedUser) -> FeatureFlag:
        self._require_known(key)
        if not actor.is_admin:
            raise InsufficientPermissionsError(UserRole.ADMIN.value, actor.role)

        flag = self._store.save(key, enabled, updated_by=actor.id)
        logger.info(f"Feature flag {key} set to {enabled} by {actor.id}")
        self._broadcaster.publish(FlagChange(key=key, enabled=enabled))
        return flag

    def subscribe(self) -> AbstractAsyncContextManager:
        """Queue of FlagChange events; see FlagBroadcaster.subscribe."""
        return self._broadcaster.subscribe()
