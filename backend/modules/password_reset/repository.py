"""
Password reset repositories.

Encapsulates the password_reset_tokens and password_reset_attempts tables.
Consumption is a single conditional UPDATE so concurrent consumers cannot
both win.
"""

import threading
import uuid
from datetime import datetime
from typing import Any, Optional

from shared.clock import parse_timestamp
from shared.repository import BaseRepository

from .models import AttemptType, PasswordResetAttempt, PasswordResetToken

TOKENS_TABLE = "password_reset_tokens"
ATTEMPTS_TABLE = "password_reset_attempts"


def _map_to_token(row: dict[str, Any]) -> PasswordResetToken:
    return PasswordResetToken(
        id=str(row["id"]),
        token=row["token"],
        user_email=row["user_email"],
        expires_at=parse_timestamp(row["expires_at"]),
        used_at=parse_timestamp(row["used_at"]) if row.get("used_at") else None,
        created_at=parse_timestamp(row["created_at"]) if row.get("created_at") else None,
    )


def _map_to_attempt(row: dict[str, Any]) -> PasswordResetAttempt:
    return PasswordResetAttempt(
        email=row["email"],
        attempt_type=AttemptType(row.get("attempt_type") or AttemptType.RESET.value),
        success=bool(row.get("success")),
        attempted_at=parse_timestamp(row["attempted_at"]),
        ip_address=row.get("ip_address"),
        user_agent=row.get("user_agent"),
    )


class ResetTokenRepository(BaseRepository[PasswordResetToken]):
    def create(self, data: dict[str, Any]) -> PasswordResetToken:
        result = self._db.table(TOKENS_TABLE).insert(data).execute()
        return _map_to_token(result.data[0])

    def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        result = self._db.table(TOKENS_TABLE).select("*").eq("token", token).limit(1).execute()
        row = self._first(result)
        return _map_to_token(row) if row else None

    def consume(self, token: str, now: datetime) -> bool:
        timestamp = now.isoformat()
        result = (
            self._db.table(TOKENS_TABLE)
            .update({"used_at": timestamp})
            .eq("token", token)
            .is_("used_at", "null")
            .gt("expires_at", timestamp)
            .execute()
        )
        return bool(result.data)


class ResetAttemptRepository(BaseRepository[PasswordResetAttempt]):
    def record(self, attempt: PasswordResetAttempt) -> None:
        self._db.table(ATTEMPTS_TABLE).insert(attempt.model_dump(mode="json")).execute()

    def list_since(self, email: str, attempt_type: AttemptType, since: datetime) -> list[PasswordResetAttempt]:
        result = (
            self._db.table(ATTEMPTS_TABLE)
            .select("*")
            .eq("email", email)
            .eq("attempt_type", attempt_type.value)
            .gt("attempted_at", since.isoformat())
            .order("attempted_at")
            .execute()
        )
        return [_map_to_attempt(row) for row in result.data or []]


class InMemoryResetTokenRepository:
    """Process-local tokens for tests and the development backend."""

    def __init__(self) -> None:
        self._tokens: dict[str, PasswordResetToken] = {}
        self._lock = threading.Lock()

    @property
    def tokens(self) -> list[PasswordResetToken]:
        return list(self._tokens.values())

    def create(self, data: dict[str, Any]) -> PasswordResetToken:
        record = PasswordResetToken(id=str(uuid.uuid4()), **data)
        with self._lock:
            self._tokens[record.token] = record
        return record

    def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        return self._tokens.get(token)

    def consume(self, token: str, now: datetime) -> bool:
        with self._lock:
            record = self._tokens.get(token)
            if record is None or record.used_at is not None or now >= record.expires_at:
                return False
            self._tokens[token] = record.model_copy(update={"used_at": now})
            return True


class InMemoryResetAttemptRepository:
    def __init__(self) -> None:
        self.attempts: list[PasswordResetAttempt] = []

    def record(self, attempt: PasswordResetAttempt) -> None:
        self.attempts.append(attempt)

    def list_since(self, email: str, attempt_type: AttemptType, since: datetime) -> list[PasswordResetAttempt]:
        matches = [
            a for a in self.attempts
            if a.email == email and a.attempt_type == attempt_type and a.attempted_at > since
        ]
        return sorted(matches, key=lambda a: a.attempted_at)
