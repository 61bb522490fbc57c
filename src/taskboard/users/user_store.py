# src/taskboard/users/user_store.py

from __future__ import annotations

import logging
from datetime import UTC, datetime

from ..core.ports import Backend, Clock, Record
from ..errors import ValidationError
from ..storage.mapping import format_ts, user_from_profile
from .user_models import UNKNOWN_USER_NAME, Role, User, default_name_for

logger = logging.getLogger(__name__)

_UNSET = object()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UserStore:
    """
    Profile access over the backend's `profiles` table.

    Profiles are owned by the identity subsystem; tasks and notifications only
    reference them by id, and dangling ids are allowed.
    """

    def __init__(self, backend: Backend, *, clock: Clock = _utcnow) -> None:
        self._table = backend.profiles
        self._clock = clock

    def list_users(self) -> list[User]:
        return [user_from_profile(r) for r in self._table.list_records()]

    def get_user(self, user_id: str) -> User | None:
        if not user_id:
            return None
        rec = self._table.get_record(user_id)
        return user_from_profile(rec) if rec else None

    def get_profile_record(self, user_id: str) -> Record | None:
        """Raw profile record (identity resolution needs to merge session data into it)."""
        if not user_id:
            return None
        return self._table.get_record(user_id)

    def find_by_email(self, email: str) -> User | None:
        needle = (email or "").strip().lower()
        if not needle:
            return None
        for rec in self._table.list_records():
            if str(rec.get("email") or "").strip().lower() == needle:
                return user_from_profile(rec)
        return None

    def create_profile(
        self,
        *,
        user_id: str,
        email: str,
        name: str | None = None,
        avatar: str | None = None,
        role: Role | str = Role.MEMBER,
    ) -> User:
        if not user_id or not str(user_id).strip():
            raise ValidationError("id", "user id is required")
        if not email or "@" not in email:
            raise ValidationError("email", "a valid email address is required")
        try:
            role = Role(role)
        except ValueError as e:
            raise ValidationError("role", f"unknown role {role!r}") from e

        rec = self._table.insert_record(
            {
                "id": str(user_id).strip(),
                "name": (name or "").strip() or default_name_for(email),
                "email": email.strip(),
                "avatar_url": avatar,
                "role": role.value,
                "created_at": format_ts(self._clock()),
            }
        )
        logger.info("Profile created id=%s role=%s", rec["id"], role.value)
        return user_from_profile(rec)

    def update_profile(
        self,
        user_id: str,
        *,
        name: object = _UNSET,
        avatar: object = _UNSET,
        role: object = _UNSET,
    ) -> User | None:
        """Only name, avatar and role are mutable. Returns None for an unknown id."""
        changes: dict[str, object] = {}
        if name is not _UNSET:
            if not isinstance(name, str) or not name.strip():
                raise ValidationError("name", "name must be a non-empty string")
            changes["name"] = name.strip()
        if avatar is not _UNSET:
            changes["avatar_url"] = avatar or None
        if role is not _UNSET:
            try:
                changes["role"] = Role(role).value  # type: ignore[arg-type]
            except ValueError as e:
                raise ValidationError("role", f"unknown role {role!r}") from e

        rec = self._table.update_record(user_id, changes)
        if rec is None:
            return None
        logger.debug("Profile updated id=%s fields=%s", user_id, sorted(changes))
        return user_from_profile(rec)

    def display_name(self, user_id: str | None) -> str:
        """Name to show for a user id; dangling or empty ids become "Unknown user"."""
        user = self.get_user(user_id) if user_id else None
        return user.name if user else UNKNOWN_USER_NAME
