# src/taskboard/users/user_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

UNKNOWN_USER_NAME = "Unknown user"


class Role(StrEnum):
    """Single role field. Nothing in the core enforces it."""

    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"

    @classmethod
    def from_db(cls, raw: str | None) -> Role:
        if not raw:
            return cls.MEMBER
        try:
            return cls(raw)
        except ValueError:
            return cls.MEMBER


@dataclass(slots=True, frozen=True)
class User:
    id: str
    name: str
    email: str
    role: Role = Role.MEMBER
    avatar: str | None = None


def default_name_for(email: str | None) -> str:
    """Local part of the email address, or "Anonymous" when there is none."""
    local = (email or "").split("@", 1)[0].strip()
    return local or "Anonymous"
