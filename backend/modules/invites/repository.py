"""
Invite link repository.
"""

import threading
from datetime import datetime
from typing import Any, Optional

from shared.clock import parse_timestamp
from shared.repository import BaseRepository

from .models import InviteLink, InviteStatus

TABLE = "invite_links"


def _map_to_invite(row: dict[str, Any]) -> InviteLink:
    return InviteLink(
        id=str(row["id"]),
        code=row["code"],
        role=row["role"],
        status=InviteStatus(row.get("status") or InviteStatus.ACTIVE.value),
        expires_at=parse_timestamp(row["expires_at"]) if row.get("expires_at") else None,
        created_by=row.get("created_by"),
        used_at=parse_timestamp(row["used_at"]) if row.get("used_at") else None,
        used_by=row.get("used_by"),
        note=row.get("note"),
    )


class InviteRepository(BaseRepository[InviteLink]):
    def get_active_by_code(self, code: str) -> Optional[InviteLink]:
        result = (
            self._db.table(TABLE)
            .select("*")
            .eq("code", code)
            .eq("status", InviteStatus.ACTIVE.value)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return _map_to_invite(row) if row else None

    def set_status(self, invite_id: str, status: InviteStatus) -> None:
        self._db.table(TABLE).update({"status": status.value}).eq("id", invite_id).execute()

    def mark_used(self, invite_id: str, user_id: str, now: datetime) -> bool:
        result = (
            self._db.table(TABLE)
            .update(
                {
                    "status": InviteStatus.USED.value,
                    "used_at": now.isoformat(),
                    "used_by": user_id,
                }
            )
            .eq("id", invite_id)
            .eq("status", InviteStatus.ACTIVE.value)
            .execute()
        )
        return bool(result.data)


class InMemoryInviteRepository:
    def __init__(self) -> None:
        self._invites: dict[str, InviteLink] = {}
        self._lock = threading.Lock()

    def add(self, invite: InviteLink) -> InviteLink:
        self._invites[invite.id] = invite
        return invite

    def get(self, invite_id: str) -> Optional[InviteLink]:
        return self._invites.get(invite_id)

    def get_active_by_code(self, code: str) -> Optional[InviteLink]:
        for invite in self._invites.values():
            if invite.code == code and invite.status == InviteStatus.ACTIVE:
                return invite
        return None

    def set_status(self, invite_id: str, status: InviteStatus) -> None:
        invite = self._invites.get(invite_id)
        if invite is not None:
            self._invites[invite_id] = invite.model_copy(update={"status": status})

    def mark_used(self, invite_id: str, user_id: str, now: datetime) -> bool:
        with self._lock:
            invite = self._invites.get(invite_id)
            if invite is None or invite.status != InviteStatus.ACTIVE:
                return False
            self._invites[invite_id] = invite.model_copy(
                update={"status": InviteStatus.USED, "used_at": now, "used_by": user_id}
            )
            return True
