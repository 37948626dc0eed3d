from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.exceptions import NotFoundError, ValidationError
from ..gateway.base import Disposer
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[Notification], None]


class NotificationService:
    """Read/write notifications and follow new ones as they are inserted.

    Passing ``employee_id`` scopes a query to one recipient; ``None`` means all
    notifications (the administrator view).
    """

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def create_notification(self, data: Mapping[str, Any]) -> Notification:
        if not data:
            raise ValidationError("Notification data is required")
        return self._notifications.create(dict(data))

    def get_notifications(
        self,
        limit: int = DEFAULT_NOTIFICATION_LIMIT,
        employee_id: Optional[str] = None,
    ) -> Sequence[Notification]:
        if limit < 1:
            raise ValidationError("Limit must be at least 1")
        return self._notifications.list_recent(limit=limit, employee_id=employee_id)

    def get_unread_notifications(self, employee_id: Optional[str] = None) -> Sequence[Notification]:
        return self._notifications.list_unread(employee_id=employee_id)

    def get_unread_count(self, employee_id: Optional[str] = None) -> int:
        return self._notifications.count_unread(employee_id=employee_id)

    def mark_as_read(self, notification_id: str, employee_id: Optional[str] = None) -> None:
        if not self._notifications.mark_read(notification_id, employee_id=employee_id):
            raise NotFoundError(f"Notification {notification_id} not found")

    def mark_all_as_read(self, employee_id: Optional[str] = None) -> int:
        # Rows inserted while this runs may or may not be included.
        updated = self._notifications.mark_all_read(employee_id=employee_id)
        logger.debug("Marked %d notification(s) as read", updated)
        return updated

    def delete_notification(self, notification_id: str, employee_id: Optional[str] = None) -> None:
        if not self._notifications.delete(notification_id, employee_id=employee_id):
            raise NotFoundError(f"Notification {notification_id} not found")

    def subscribe_to_notifications(
        self,
        callback: NotificationCallback,
        employee_id: Optional[str] = None,
    ) -> Disposer:
        """Call ``callback`` once per inserted notification until the returned disposer is called.

        With ``employee_id`` set, only notifications addressed to that recipient are delivered.
        """
        if employee_id is None:
            return self._notifications.subscribe_inserts(callback)

        def scoped(notification: Notification) -> None:
            if notification.employee_id == employee_id:
                callback(notification)

        return self._notifications.subscribe_inserts(scoped)
