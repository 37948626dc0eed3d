from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import now_utc, parse_optional_date
from ..common.validators import require_choice, require_non_empty
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.model import CurrentUser
from .model import Task, TaskStatistics
from .repository import TaskRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "description", "assigned_to", "priority", "due_date", "status"})


class TaskService:
    """Use cases around tasks.

    Completion timestamp rule: every transition into ``completed`` stamps
    ``completed_at`` with the current UTC time and every transition into
    ``pending`` clears it, whichever operation changes the status.
    """

    def __init__(self, tasks: TaskRepository, *, clock: Callable[[], datetime] = now_utc):
        self._tasks = tasks
        self._clock = clock

    def create_task(
        self,
        *,
        title: str,
        description: Optional[str] = "",
        assigned_to: str,
        created_by: str,
        priority: Union[TaskPriority, str] = TaskPriority.MEDIUM,
        due_date: Union[date, str, None] = None,
    ) -> Task:
        title = require_non_empty(title, "Title")
        assigned_to = require_non_empty(assigned_to, "Assignee")
        created_by = require_non_empty(created_by, "Creator")
        priority = require_choice(priority, TaskPriority, "Priority")
        due = parse_optional_date(due_date, "Due date")

        task = self._tasks.create(
            title=title,
            description=(description or "").strip(),
            assigned_to=assigned_to,
            created_by=created_by,
            priority=priority,
            status=TaskStatus.PENDING,
            due_date=due,
        )
        logger.info("Task %s created for %s by %s", task.task_id, assigned_to, created_by)
        return task

    def get_all_tasks(self) -> Sequence[Task]:
        return self._tasks.list_all()

    def get_tasks_by_employee(self, employee_id: str) -> Sequence[Task]:
        return self._tasks.list_by_assignee(require_non_empty(employee_id, "Employee"))

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def _status_values(self, task_id: str, status: Union[TaskStatus, str]) -> Dict[str, Any]:
        status = require_choice(status, TaskStatus, "Status")
        if self.get_task(task_id).status == status:
            # Re-saving the same status keeps the original completion time.
            return {"status": status}
        completed_at = self._clock() if status == TaskStatus.COMPLETED else None
        return {"status": status, "completed_at": completed_at}

    def update_task(self, task_id: str, fields: Mapping[str, Any]) -> Task:
        if not fields:
            raise ValidationError("Nothing to update")
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        values: Dict[str, Any] = {}
        for name, value in fields.items():
            if name == "title":
                values["title"] = require_non_empty(value, "Title")
            elif name == "assigned_to":
                values["assigned_to"] = require_non_empty(value, "Assignee")
            elif name == "description":
                values["description"] = (value or "").strip()
            elif name == "priority":
                values["priority"] = require_choice(value, TaskPriority, "Priority")
            elif name == "due_date":
                values["due_date"] = parse_optional_date(value, "Due date")
            elif name == "status":
                values.update(self._status_values(task_id, value))

        return self._apply(task_id, values)

    def update_task_status(self, task_id: str, status: Union[TaskStatus, str]) -> Task:
        return self._apply(task_id, self._status_values(task_id, status))

    def toggle_task_status(self, *, current_user: CurrentUser, task_id: str) -> Task:
        """Flip pending/completed. Employees may only toggle their own tasks."""
        task = self.get_task(task_id)
        if not current_user.is_admin and task.assigned_to != current_user.user_id:
            raise AuthorizationError("You can only update your own tasks")
        return self.update_task_status(task.task_id, task.status.toggled())

    def _apply(self, task_id: str, values: Mapping[str, Any]) -> Task:
        task = self._tasks.update(task_id, values)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    def delete_task(self, task_id: str) -> None:
        if not self._tasks.delete(task_id):
            raise NotFoundError(f"Task {task_id} not found")
        logger.info("Task %s deleted", task_id)

    def get_task_statistics(self, employee_id: Optional[str] = None) -> TaskStatistics:
        statuses = self._tasks.list_statuses(assigned_to=employee_id)
        completed = sum(1 for s in statuses if s == TaskStatus.COMPLETED)
        return TaskStatistics.from_counts(completed=completed, pending=len(statuses) - completed)
