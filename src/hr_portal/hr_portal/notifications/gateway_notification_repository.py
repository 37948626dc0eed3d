from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_timestamp
from ..core.constants import NOTIFICATIONS_TABLE
from ..gateway.base import DataGateway, Disposer, Row
from .model import Notification
from .repository import NotificationRepository

KNOWN_COLUMNS = frozenset({"id", "type", "title", "message", "employee_id", "is_read", "created_at"})


def to_notification(row: Row) -> Notification:
    employee_id = row.get("employee_id")
    return Notification(
        notification_id=str(row["id"]),
        type=row.get("type") or "",
        title=row.get("title") or "",
        message=row.get("message") or "",
        employee_id=str(employee_id) if employee_id is not None else None,
        is_read=bool(row.get("is_read")),
        created_at=parse_timestamp(row.get("created_at")),
        extra={k: v for k, v in row.items() if k not in KNOWN_COLUMNS},
    )


def _scope(employee_id: Optional[str], **filters: Any) -> Dict[str, Any]:
    if employee_id:
        filters["employee_id"] = employee_id
    return filters


class GatewayNotificationRepository(NotificationRepository):
    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def create(self, data: Mapping[str, Any]) -> Notification:
        return to_notification(self._gateway.insert(NOTIFICATIONS_TABLE, data))

    def list_recent(self, *, limit: int, employee_id: Optional[str] = None) -> Sequence[Notification]:
        rows = self._gateway.select(
            NOTIFICATIONS_TABLE,
            filters=_scope(employee_id) or None,
            order_by="created_at",
            descending=True,
            limit=limit,
        )
        return [to_notification(r) for r in rows]

    def list_unread(self, *, employee_id: Optional[str] = None) -> Sequence[Notification]:
        rows = self._gateway.select(
            NOTIFICATIONS_TABLE,
            filters=_scope(employee_id, is_read=False),
            order_by="created_at",
            descending=True,
        )
        return [to_notification(r) for r in rows]

    def count_unread(self, *, employee_id: Optional[str] = None) -> int:
        return self._gateway.count(NOTIFICATIONS_TABLE, filters=_scope(employee_id, is_read=False))

    def mark_read(self, notification_id: str, *, employee_id: Optional[str] = None) -> bool:
        rows = self._gateway.update(NOTIFICATIONS_TABLE, {"is_read": True}, filters=_scope(employee_id, id=notification_id))
        return bool(rows)

    def mark_all_read(self, *, employee_id: Optional[str] = None) -> int:
        rows = self._gateway.update(
            NOTIFICATIONS_TABLE,
            {"is_read": True},
            filters=_scope(employee_id, is_read=False),
        )
        return len(rows)

    def delete(self, notification_id: str, *, employee_id: Optional[str] = None) -> bool:
        return bool(self._gateway.delete(NOTIFICATIONS_TABLE, filters=_scope(employee_id, id=notification_id)))

    def subscribe_inserts(self, callback: Callable[[Notification], None]) -> Disposer:
        return self._gateway.subscribe(NOTIFICATIONS_TABLE, lambda row: callback(to_notification(row)))
