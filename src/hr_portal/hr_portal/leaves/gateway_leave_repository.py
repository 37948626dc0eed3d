from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import parse_iso_date, parse_timestamp
from ..core.constants import LEAVES_TABLE
from ..core.enums import LeaveStatus
from ..gateway.base import DataGateway, Row
from .model import Leave
from .repository import LeaveRepository


def _to_date(value: Any) -> date:
    return value if isinstance(value, date) else parse_iso_date(str(value)[:10])


def _to_leave(row: Row) -> Leave:
    decided_by = row.get("decided_by")
    return Leave(
        leave_id=str(row["id"]),
        employee_id=str(row["employee_id"]),
        start_date=_to_date(row["start_date"]),
        end_date=_to_date(row["end_date"]),
        reason=row.get("reason") or "",
        status=LeaveStatus(row.get("status") or LeaveStatus.PENDING.value),
        created_at=parse_timestamp(row.get("created_at")),
        decided_by=str(decided_by) if decided_by is not None else None,
        decided_at=parse_timestamp(row.get("decided_at")),
        admin_note=row.get("admin_note"),
    )


class GatewayLeaveRepository(LeaveRepository):
    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def create(self, *, employee_id: str, start_date: date, end_date: date, reason: str) -> Leave:
        row = self._gateway.insert(
            LEAVES_TABLE,
            {
                "employee_id": employee_id,
                "start_date": start_date,
                "end_date": end_date,
                "reason": reason,
                "status": LeaveStatus.PENDING,
            },
        )
        return _to_leave(row)

    def get_by_id(self, leave_id: str) -> Optional[Leave]:
        rows = self._gateway.select(LEAVES_TABLE, filters={"id": leave_id}, limit=1)
        return _to_leave(rows[0]) if rows else None

    def list_leaves(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
    ) -> Sequence[Leave]:
        filters: Dict[str, Any] = {}
        if status is not None:
            filters["status"] = status
        if employee_id is not None:
            filters["employee_id"] = employee_id
        rows = self._gateway.select(LEAVES_TABLE, filters=filters or None, order_by="created_at", descending=True)
        return [_to_leave(r) for r in rows]

    def decide(
        self,
        *,
        leave_id: str,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        rows = self._gateway.update(
            LEAVES_TABLE,
            {"status": status, "decided_by": decided_by, "decided_at": decided_at, "admin_note": admin_note},
            filters={"id": leave_id, "status": LeaveStatus.PENDING},
        )
        return bool(rows)

    def list_statuses(self) -> Sequence[LeaveStatus]:
        rows = self._gateway.select(LEAVES_TABLE, columns="status")
        return [LeaveStatus(r["status"]) for r in rows]
