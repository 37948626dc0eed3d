from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for access control."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def toggled(self) -> "TaskStatus":
        return TaskStatus.COMPLETED if self is TaskStatus.PENDING else TaskStatus.PENDING


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LeaveStatus(str, Enum):
    """Approval flow state of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
