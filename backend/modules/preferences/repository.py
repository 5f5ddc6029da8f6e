"""
Feature flag stores.
"""

from typing import Any, Optional

from shared.clock import parse_timestamp, utc_now
from shared.repository import BaseRepository

from .models import FeatureFlag

TABLE = "feature_flags"


def _map_to_flag(row: dict[str, Any]) -> FeatureFlag:
    return FeatureFlag(
        key=row["key"],
        enabled=bool(row["enabled"]),
        updated_at=parse_timestamp(row["updated_at"]) if row.get("updated_at") else None,
        updated_by=row.get("updated_by"),
    )


class SupabaseFeatureFlagStore(BaseRepository[FeatureFlag]):
    def load_all(self) -> dict[str, bool]:
        result = self._db.table(TABLE).select("key, enabled").execute()
        return {row["key"]: bool(row["enabled"]) for row in result.data or []}

    def save(self, key: str, enabled: bool, updated_by: Optional[str] = None) -> FeatureFlag:
        data = {
            "key": key,
            "enabled": enabled,
            "updated_at": utc_now().isoformat(),
            "updated_by": updated_by,
        }
        result = self._db.table(TABLE).upsert(data, on_conflict="key").execute()
        return _map_to_flag(result.data[0] if result.data else data)


class InMemoryFeatureFlagStore:
    def __init__(self, initial: Optional[dict[str, bool]] = None) -> None:
        self._flags: dict[str, FeatureFlag] = {
            key: FeatureFlag(key=key, enabled=value) for key, value in (initial or {}).items()
        }

    def load_all(self) -> dict[str, bool]:
        return {key: flag.enabled for key, flag in self._flags.items()}

    def save(self, key: str, enabled: bool, updated_by: Optional[str] = None) -> FeatureFlag:
        flag = FeatureFlag(key=key, enabled=enabled, updated_at=utc_now(), updated_by=updated_by)
        self._flags[key] = flag
        return flag
