from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_optional_date, parse_timestamp
from ..core.constants import TASKS_TABLE
from ..core.enums import TaskPriority, TaskStatus
from ..gateway.base import DataGateway, Row
from .model import Task
from .repository import TaskRepository


def _to_task(row: Row) -> Task:
    return Task(
        task_id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        assigned_to=str(row.get("assigned_to") or ""),
        created_by=str(row.get("created_by") or ""),
        priority=TaskPriority(row.get("priority") or TaskPriority.MEDIUM.value),
        status=TaskStatus(row.get("status") or TaskStatus.PENDING.value),
        due_date=parse_optional_date(row.get("due_date"), "Due date"),
        completed_at=parse_timestamp(row.get("completed_at")),
        created_at=parse_timestamp(row.get("created_at")),
    )


class GatewayTaskRepository(TaskRepository):
    def __init__(self, gateway: DataGateway):
        self._gateway = gateway

    def create(
        self,
        *,
        title: str,
        description: str,
        assigned_to: str,
        created_by: str,
        priority: TaskPriority,
        status: TaskStatus,
        due_date: Optional[date],
    ) -> Task:
        row = self._gateway.insert(
            TASKS_TABLE,
            {
                "title": title,
                "description": description,
                "assigned_to": assigned_to,
                "created_by": created_by,
                "priority": priority,
                "status": status,
                "due_date": due_date,
            },
        )
        return _to_task(row)

    def get_by_id(self, task_id: str) -> Optional[Task]:
        rows = self._gateway.select(TASKS_TABLE, filters={"id": task_id}, limit=1)
        return _to_task(rows[0]) if rows else None

    def list_all(self) -> Sequence[Task]:
        rows = self._gateway.select(TASKS_TABLE, order_by="created_at", descending=True)
        return [_to_task(r) for r in rows]

    def list_by_assignee(self, employee_id: str) -> Sequence[Task]:
        rows = self._gateway.select(
            TASKS_TABLE,
            filters={"assigned_to": employee_id},
            order_by="created_at",
            descending=True,
        )
        return [_to_task(r) for r in rows]

    def update(self, task_id: str, values: Mapping[str, Any]) -> Optional[Task]:
        rows = self._gateway.update(TASKS_TABLE, values, filters={"id": task_id})
        return _to_task(rows[0]) if rows else None

    def delete(self, task_id: str) -> bool:
        return bool(self._gateway.delete(TASKS_TABLE, filters={"id": task_id}))

    def list_statuses(self, *, assigned_to: Optional[str] = None) -> Sequence[TaskStatus]:
        filters = {"assigned_to": assigned_to} if assigned_to else None
        rows = self._gateway.select(TASKS_TABLE, columns="status", filters=filters)
        return [TaskStatus(r["status"]) for r in rows]
