from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import Leave


class LeaveRepository(Protocol):
    def create(self, *, employee_id: str, start_date: date, end_date: date, reason: str) -> Leave:
        raise NotImplementedError

    def get_by_id(self, leave_id: str) -> Optional[Leave]:
        raise NotImplementedError

    def list_leaves(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[Leave]:
        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: str,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Move a pending leave to ``status``; False when it was not pending."""

        raise NotImplementedError

    def list_statuses(self) -> Sequence[LeaveStatus]:
        raise NotImplementedError
