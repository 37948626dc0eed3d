from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Notification:
    """Domain entity: one notification row.

    Note: columns outside the known set are kept untouched in ``extra``.
    """

    notification_id: str
    type: str
    title: str
    message: str
    employee_id: Optional[str] = None
    is_read: bool = False
    created_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "id": self.notification_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "employee_id": self.employee_id,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
