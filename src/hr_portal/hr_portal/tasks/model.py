from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    """Domain entity: a unit of work assigned to one employee."""

    task_id: str
    title: str
    description: str
    assigned_to: str
    created_by: str
    priority: TaskPriority
    status: TaskStatus
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


@dataclass(frozen=True)
class TaskStatistics:
    total: int
    completed: int
    pending: int
    percentage: int

    @classmethod
    def from_counts(cls, completed: int, pending: int) -> "TaskStatistics":
        total = completed + pending
        # Integer half-up rounding of 100 * completed / total.
        percentage = (completed * 200 + total) // (2 * total) if total else 0
        return cls(total=total, completed=completed, pending=pending, percentage=percentage)
