from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import now_utc, parse_optional_date
from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Leave, LeaveStatistics
from .repository import LeaveRepository


class LeaveService:
    def __init__(self, leaves: LeaveRepository, *, clock: Callable[[], datetime] = now_utc):
        self._leaves = leaves
        self._clock = clock

    def create_leave(
        self,
        *,
        current_role: Role,
        employee_id: str,
        start_date: Union[date, str, None],
        end_date: Union[date, str, None],
        reason: str,
    ) -> Leave:
        if current_role != Role.EMPLOYEE:
            raise AuthorizationError("Only employees can apply for leave")

        start = parse_optional_date(start_date, "Start date")
        end = parse_optional_date(end_date, "End date")
        if start is None or end is None:
            raise ValidationError("Start date and end date are required")
        if end < start:
            raise ValidationError("End date must be on or after the start date")

        reason = require_non_empty(reason, "Reason")
        return self._leaves.create(employee_id=employee_id, start_date=start, end_date=end, reason=reason)

    def approve_leave(self, *, current_role: Role, admin_user_id: str, leave_id: str, admin_note: str = "") -> None:
        self._decide(current_role, admin_user_id, leave_id, LeaveStatus.APPROVED, admin_note)

    def reject_leave(self, *, current_role: Role, admin_user_id: str, leave_id: str, admin_note: str = "") -> None:
        self._decide(current_role, admin_user_id, leave_id, LeaveStatus.REJECTED, admin_note)

    def _decide(
        self,
        current_role: Role,
        admin_user_id: str,
        leave_id: str,
        status: LeaveStatus,
        admin_note: str,
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission to do that")

        leave = self._leaves.get_by_id(leave_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise ValidationError("Leave request has already been processed")

        decided = self._leaves.decide(
            leave_id=leave_id,
            status=status,
            decided_by=admin_user_id,
            decided_at=self._clock(),
            admin_note=(admin_note or "").strip() or None,
        )
        if not decided:
            raise ValidationError("Leave request has already been processed")

    def list_my_leaves(self, *, employee_id: str) -> Sequence[Leave]:
        return self._leaves.list_leaves(employee_id=employee_id)

    def list_leaves(self, status: Optional[LeaveStatus] = None) -> Sequence[Leave]:
        return self._leaves.list_leaves(status=status)

    def get_leave_statistics(self) -> LeaveStatistics:
        counts = Counter(self._leaves.list_statuses())
        return LeaveStatistics(
            applied=sum(counts.values()),
            approved=counts[LeaveStatus.APPROVED],
            pending=counts[LeaveStatus.PENDING],
            rejected=counts[LeaveStatus.REJECTED],
        )
