"""
User repository for database access.

Encapsulates the users table and the Supabase Auth admin calls that
operate on the same user.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from shared.clock import parse_timestamp, utc_now
from shared.repository import BaseRepository
from shared.validators import normalize_email

from .models import UserProfile, UserRole

logger = logging.getLogger(__name__)


def _map_to_profile(row: dict[str, Any]) -> UserProfile:
    created_at = row.get("created_at")
    return UserProfile(
        id=str(row["id"]),
        email=row.get("email") or "",
        name=row.get("name"),
        phone=row.get("phone"),
        email_verified=bool(row.get("email_verified")),
        role=row.get("user_role") or UserRole.CUSTOMER.value,
        created_at=parse_timestamp(created_at) if created_at else None,
    )


class UserRepository(BaseRepository[UserProfile]):
    """
    Repository for users rows.

    Uses the service-role client; callers are responsible for ownership checks.
    """

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        result = self._db.table("users").select("*").eq("id", user_id).limit(1).execute()
        row = self._first(result)
        return _map_to_profile(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        normalized = normalize_email(email)
        if not normalized:
            return None
        result = (
            self._db.table("users")
            .select("*")
            .ilike("email", normalized)
            .limit(1)
            .execute()
        )
        row = self._first(result)
        return _map_to_profile(row) if row else None

    def update_profile(self, user_id: str, fields: dict) -> Optional[UserProfile]:
        if not fields:
            return self.get_by_id(user_id)
        result = self._db.table("users").update(fields).eq("id", user_id).execute()
        row = self._first(result)
        return _map_to_profile(row) if row else None

    def set_email_verified(self, user_id: str) -> None:
        self._db.table("users").update({"email_verified": True}).eq("id", user_id).execute()

    def sync_auth_email_verified(self, user_id: str) -> None:
        self._db.auth.admin.update_user_by_id(
            user_id,
            {"user_metadata": {"email_verified": True}},
        )

    def update_password(self, user_id: str, password: str) -> None:
        self._db.auth.admin.update_user_by_id(user_id, {"password": password})


class InMemoryUserRepository:
    """
    Dict-backed user store.

    Backs the development verification backend and the test suite.
    Passwords are kept only so tests can assert a reset happened.
    """

    def __init__(self) -> None:
        self._users: dict[str, UserProfile] = {}
        self.passwords: dict[str, str] = {}
        self.auth_metadata: dict[str, dict[str, Any]] = {}

    def add(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        role: str = UserRole.CUSTOMER.value,
        email_verified: bool = False,
        created_at: Optional[datetime] = None,
    ) -> UserProfile:
        profile = UserProfile(
            id=user_id,
            email=normalize_email(email),
            name=name,
            email_verified=email_verified,
            role=role,
            created_at=created_at or utc_now(),
        )
        self._users[user_id] = profile
        return profile

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        normalized = normalize_email(email)
        for profile in self._users.values():
            if profile.email == normalized:
                return profile
        return None

    def update_profile(self, user_id: str, fields: dict) -> Optional[UserProfile]:
        profile = self._users.get(user_id)
        if profile is None:
            return None
        if "user_role" in fields:
            fields = {**fields, "role": fields["user_role"]}
            del fields["user_role"]
        updated = profile.model_copy(update=fields)
        self._users[user_id] = updated
        return updated

    def set_email_verified(self, user_id: str) -> None:
        profile = self._users.get(user_id)
        if profile is not None:
            self._users[user_id] = profile.model_copy(update={"email_verified": True})

    def sync_auth_email_verified(self, user_id: str) -> None:
        self.auth_metadata.setdefault(user_id, {})["email_verified"] = True

    def update_password(self, user_id: str, password: str) -> None:
        self.passwords[user_id] = password
