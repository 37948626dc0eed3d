from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..core.constants import USERS_TABLE
from ..core.enums import Role
from ..gateway.base import DataGateway, Row
from .model import User
from .repository import UserRepository


def _to_user(row: Row) -> User:
    return User(
        user_id=str(row["id"]),
        email=row["email"],
        full_name=row.get("full_name") or "",
        role=Role(row["role"]),
        password_hash=row.get("password") or "",
        department=row.get("department"),
        created_at=parse_timestamp(row.get("created_at")),
    )


class GatewayUserRepository(UserRepository):
    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def _first(self, **filters) -> Optional[User]:
        rows = self._gateway.select(USERS_TABLE, filters=filters, limit=1)
        return _to_user(rows[0]) if rows else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._first(id=user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._first(email=email)

    def create_user(self, *, email: str, full_name: str, password_hash: str, role: Role) -> User:
        row = self._gateway.insert(
            USERS_TABLE,
            {"email": email, "full_name": full_name, "password": password_hash, "role": role.value},
        )
        return _to_user(row)

    def list_all(self) -> Sequence[User]:
        return [_to_user(r) for r in self._gateway.select(USERS_TABLE, order_by="full_name")]

    def list_by_role(self, role: Role) -> Sequence[User]:
        rows = self._gateway.select(USERS_TABLE, filters={"role": role.value}, order_by="full_name")
        return [_to_user(r) for r in rows]

    def count_by_role(self, role: Role) -> int:
        return self._gateway.count(USERS_TABLE, filters={"role": role.value})
