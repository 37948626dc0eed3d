from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
    """Repository interface for Task.

    Note (DIP): TaskService depends on this interface, not on the hosted store.
    """

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
        raise NotImplementedError

    def get_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Task]:
        """Newest first by creation time."""

        raise NotImplementedError

    def list_by_assignee(self, employee_id: str) -> Sequence[Task]:
        raise NotImplementedError

    def update(self, task_id: str, values: Mapping[str, Any]) -> Optional[Task]:
        """Return the updated task, or None when no row matched."""

        raise NotImplementedError

    def delete(self, task_id: str) -> bool:
        raise NotImplementedError

    def list_statuses(self, *, assigned_to: Optional[str] = None) -> Sequence[TaskStatus]:
        raise NotImplementedError
