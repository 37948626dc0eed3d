from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..core.enums import Role
from .model import User
from .repository import UserRepository


class UserService:
    """Use case: browse the employee directory."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)

    def list_employees(self) -> Sequence[User]:
        return self._users.list_by_role(Role.EMPLOYEE)

    def count_employees(self) -> int:
        return self._users.count_by_role(Role.EMPLOYEE)

    def user_names(self) -> Dict[str, str]:
        """Map user id -> display name for every user, admins included."""
        return {u.user_id: u.full_name for u in self._users.list_all()}
