from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from ..gateway.base import Disposer
from .model import Notification


class NotificationRepository(Protocol):
    def create(self, data: Mapping[str, Any]) -> Notification:
        raise NotImplementedError

    def list_recent(self, *, limit: int, employee_id: Optional[str] = None) -> Sequence[Notification]:
        raise NotImplementedError

    def list_unread(self, *, employee_id: Optional[str] = None) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread(self, *, employee_id: Optional[str] = None) -> int:
        raise NotImplementedError

    def mark_read(self, notification_id: str, *, employee_id: Optional[str] = None) -> bool:
        raise NotImplementedError

    def mark_all_read(self, *, employee_id: Optional[str] = None) -> int:
        raise NotImplementedError

    def delete(self, notification_id: str, *, employee_id: Optional[str] = None) -> bool:
        raise NotImplementedError

    def subscribe_inserts(self, callback: Callable[[Notification], None]) -> Disposer:
        raise NotImplementedError
