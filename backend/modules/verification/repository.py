"""
Email verification repository.

Encapsulates the email_verifications table. The conditional update in
mark_verified is what makes double submission safe.
"""

import threading
import uuid
from datetime import datetime
from typing import Any, Callable, Optional

from shared.clock import parse_timestamp
from shared.repository import BaseRepository

from .models import EmailVerification

TABLE = "email_verifications"


def _map_to_verification(row: dict[str, Any]) -> EmailVerification:
    return EmailVerification(
        id=str(row["id"]),
        user_id=str(row["user_id"]) if row.get("user_id") else None,
        email=row["email"],
        token=row["token"],
        magic_token=row["magic_token"],
        created_at=parse_timestamp(row["created_at"]),
        expires_at=parse_timestamp(row["expires_at"]),
        verified=bool(row.get("verified")),
    )


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError):
        return False
    return True


class VerificationRepository(BaseRepository[EmailVerification]):
    """Supabase-backed verification records (service role)."""

    def create(self, data: dict[str, Any]) -> EmailVerification:
        result = self._db.table(TABLE).insert(data).execute()
        return _map_to_verification(result.data[0])

    def get_by_id(self, verification_id: str) -> Optional[EmailVerification]:
        # ids are UUID columns; anything else can't match
        if not _is_uuid(verification_id):
            return None
        result = self._db.table(TABLE).select("*").eq("id", verification_id).limit(1).execute()
        row = self._first(result)
        return _map_to_verification(row) if row else None

    def get_by_magic_token(self, magic_token: str) -> Optional[EmailVerification]:
        result = self._db.table(TABLE).select("*").eq("magic_token", magic_token).limit(1).execute()
        row = self._first(result)
        return _map_to_verification(row) if row else None

    def latest_for_email(self, email: str) -> Optional[EmailVerification]:
        result = (
            self._db.table(TABLE)
            .select("*")
            .eq("email", email)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return _map_to_verification(row) if row else None

    def list_created_since(self, email: str, since: datetime) -> list[EmailVerification]:
        result = (
            self._db.table(TABLE)
            .select("*")
            .eq("email", email)
            .gt("created_at", since.isoformat())
            .order("created_at")
            .execute()
        )
        return [_map_to_verification(row) for row in result.data or []]

    def latest_unverified_for_user(self, user_id: str) -> Optional[EmailVerification]:
        result = (
            self._db.table(TABLE)
            .select("*")
            .eq("user_id", user_id)
            .eq("verified", False)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return _map_to_verification(row) if row else None

    def mark_verified(self, verification_id: str) -> bool:
        result = (
            self._db.table(TABLE)
            .update({"verified": True})
            .eq("id", verification_id)
            .eq("verified", False)
            .execute()
        )
        return bool(result.data)


class InMemoryVerificationRepository:
    """
    Process-local verification records.

    Used by the development backend and by tests. A lock makes
    mark_verified behave like the conditional UPDATE.
    """

    def __init__(self, id_factory: Optional[Callable[[], str]] = None) -> None:
        self._records: dict[str, EmailVerification] = {}
        self._lock = threading.Lock()
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))

    @property
    def records(self) -> list[EmailVerification]:
        return list(self._records.values())

    def create(self, data: dict[str, Any]) -> EmailVerification:
        record = EmailVerification(id=self._id_factory(), **data)
        with self._lock:
            self._records[record.id] = record
        return record

    def get_by_id(self, verification_id: str) -> Optional[EmailVerification]:
        return self._records.get(verification_id)

    def get_by_magic_token(self, magic_token: str) -> Optional[EmailVerification]:
        for record in self._records.values():
            if record.magic_token == magic_token:
                return record
        return None

    def latest_for_email(self, email: str) -> Optional[EmailVerification]:
        matches = [r for r in self._records.values() if r.email == email]
        return max(matches, key=lambda r: r.created_at) if matches else None

    def list_created_since(self, email: str, since: datetime) -> list[EmailVerification]:
        matches = [r for r in self._records.values() if r.email == email and r.created_at > since]
        return sorted(matches, key=lambda r: r.created_at)

    def latest_unverified_for_user(self, user_id: str) -> Optional[EmailVerification]:
        matches = [
            r for r in self._records.values()
            if r.user_id == user_id and not r.verified
        ]
        return max(matches, key=lambda r: r.created_at) if matches else None

    def mark_verified(self, verification_id: str) -> bool:
        with self._lock:
            record = self._records.get(verification_id)
            if record is None or record.verified:
                return False
            self._records[verification_id] = record.model_copy(update={"verified": True})
            return True
