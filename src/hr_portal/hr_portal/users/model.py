from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: application-level user row.

    Note: ``password_hash`` is the application's own hash, unrelated to the
    identity provider's credential for the same email.
    """

    user_id: str
    email: str
    full_name: str
    role: Role
    password_hash: str = field(default="", repr=False)
    department: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CurrentUser:
    """Identity exposed to views after login."""

    user_id: str
    email: str
    full_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_user(cls, user: User) -> "CurrentUser":
        return cls(user_id=user.user_id, email=user.email, full_name=user.full_name, role=user.role)
