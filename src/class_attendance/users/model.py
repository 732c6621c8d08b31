from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a principal.

    Note: Plain data object; ``password_hash`` must never leave the service layer.
    """

    user_id: int
    username: str
    email: str
    password_hash: str
    role: Role
    class_id: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    student_code: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.username

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "class_id": self.class_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "student_id": self.student_code,
            "display_name": self.display_name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class CurrentUser:
    """Identity claims resolved from a bearer token.

    Only what was embedded at issuance; not re-checked against storage, so a
    deleted user keeps a usable token until it expires.
    """

    user_id: int
    username: str
    email: str
    role: Role

    def to_dict(self) -> dict:
        return {"id": self.user_id, "username": self.username, "email": self.email, "role": self.role.value}
