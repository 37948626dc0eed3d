from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.hr_portal.hr_portal.core.enums import TaskPriority, TaskStatus
from src.hr_portal.hr_portal.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from src.hr_portal.hr_portal.tasks.gateway_task_repository import GatewayTaskRepository
from src.hr_portal.hr_portal.tasks.model import TaskStatistics
from src.hr_portal.hr_portal.tasks.service import TaskService

from tests.fakes import InMemoryGateway


@pytest.fixture()
def service(gateway, fixed_now) -> TaskService:
    return TaskService(GatewayTaskRepository(gateway), clock=lambda: fixed_now)


def test_create_then_list_returns_pending_task_with_supplied_fields(service, admin, employee):
    created = service.create_task(
        title="Draft report",
        description="Q1 numbers",
        assigned_to=employee.user_id,
        created_by=admin.user_id,
        priority="high",
        due_date="2026-03-31",
    )

    tasks = service.get_all_tasks()
    assert [t.task_id for t in tasks] == [created.task_id]
    task = tasks[0]
    assert task.status == TaskStatus.PENDING
    assert task.title == "Draft report"
    assert task.description == "Q1 numbers"
    assert task.assigned_to == employee.user_id
    assert task.created_by == admin.user_id
    assert task.priority == TaskPriority.HIGH
    assert task.due_date == date(2026, 3, 31)
    assert task.completed_at is None


def test_create_defaults_priority_and_description(service, admin, employee):
    task = service.create_task(title="Call client", description=None, assigned_to=employee.user_id, created_by=admin.user_id)

    assert task.priority == TaskPriority.MEDIUM
    assert task.description == ""
    assert task.due_date is None


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": "   "}, "Title is required"),
        ({"assigned_to": ""}, "Assignee is required"),
        ({"created_by": ""}, "Creator is required"),
        ({"priority": "urgent"}, "Priority must be one of"),
        ({"due_date": "31/03/2026"}, "YYYY-MM-DD"),
    ],
)
def test_create_validates_before_touching_the_store(gateway, service, overrides, message):
    kwargs = {"title": "T", "assigned_to": "u1", "created_by": "u2"}
    kwargs.update(overrides)

    with pytest.raises(ValidationError, match=message):
        service.create_task(**kwargs)
    assert "insert" not in gateway.calls


def test_create_surfaces_store_rejection_of_unknown_assignee(fixed_now, admin):
    gateway = InMemoryGateway(foreign_keys={"tasks": {"assigned_to": "users"}})
    service = TaskService(GatewayTaskRepository(gateway), clock=lambda: fixed_now)

    with pytest.raises(PersistenceError):
        service.create_task(title="Orphan", assigned_to="no-such-user", created_by=admin.user_id)


def test_lists_are_newest_first_and_filter_by_assignee(service, admin, employee, other_employee):
    first = service.create_task(title="first", assigned_to=employee.user_id, created_by=admin.user_id)
    other = service.create_task(title="other", assigned_to=other_employee.user_id, created_by=admin.user_id)
    third = service.create_task(title="third", assigned_to=employee.user_id, created_by=admin.user_id)

    assert [t.task_id for t in service.get_all_tasks()] == [third.task_id, other.task_id, first.task_id]
    assert [t.task_id for t in service.get_tasks_by_employee(employee.user_id)] == [third.task_id, first.task_id]
    assert service.get_tasks_by_employee("nobody") == []


def test_empty_store_lists_nothing(service):
    assert service.get_all_tasks() == []


def test_scenario_create_then_complete_updates_statistics(service, admin, employee):
    task = service.create_task(title="Draft report", assigned_to=employee.user_id, created_by=admin.user_id, priority="high")
    assert service.get_all_tasks()[0].status == TaskStatus.PENDING

    service.update_task_status(task.task_id, "completed")

    assert service.get_task_statistics() == TaskStatistics(total=1, completed=1, pending=0, percentage=100)


def test_statistics_with_no_tasks_is_all_zero(service):
    assert service.get_task_statistics() == TaskStatistics(total=0, completed=0, pending=0, percentage=0)


@pytest.mark.parametrize(
    "completed, pending, expected",
    [(1, 2, 33), (2, 1, 67), (1, 1, 50), (1, 7, 13), (0, 4, 0), (3, 0, 100)],
)
def test_percentage_rounds_half_up(completed, pending, expected):
    stats = TaskStatistics.from_counts(completed=completed, pending=pending)

    assert stats.total == completed + pending
    assert stats.percentage == expected


def test_statistics_scoped_to_employee(service, admin, employee, other_employee):
    a = service.create_task(title="a", assigned_to=employee.user_id, created_by=admin.user_id)
    service.create_task(title="b", assigned_to=employee.user_id, created_by=admin.user_id)
    service.create_task(title="c", assigned_to=other_employee.user_id, created_by=admin.user_id)
    service.update_task_status(a.task_id, TaskStatus.COMPLETED)

    mine = service.get_task_statistics(employee.user_id)
    assert (mine.total, mine.completed, mine.pending, mine.percentage) == (2, 1, 1, 50)
    assert service.get_task_statistics().total == 3


def test_completion_stamps_and_reopening_clears_timestamp(service, admin, employee, fixed_now):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    done = service.update_task_status(task.task_id, TaskStatus.COMPLETED)
    assert done.completed_at == fixed_now

    reopened = service.update_task_status(task.task_id, TaskStatus.PENDING)
    assert reopened.completed_at is None


def test_update_task_applies_the_same_timestamp_rule(service, admin, employee, fixed_now):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    updated = service.update_task(task.task_id, {"status": "completed", "title": "renamed"})

    assert updated.title == "renamed"
    assert updated.status == TaskStatus.COMPLETED
    assert updated.completed_at == fixed_now


def test_toggle_twice_restores_status_and_leaves_other_fields(service, admin, employee):
    task = service.create_task(
        title="t", description="d", assigned_to=employee.user_id, created_by=admin.user_id, due_date=date(2026, 4, 1)
    )

    once = service.toggle_task_status(current_user=employee, task_id=task.task_id)
    twice = service.toggle_task_status(current_user=employee, task_id=task.task_id)

    assert once.status == TaskStatus.COMPLETED
    assert twice.status == TaskStatus.PENDING
    for field in ("title", "description", "assigned_to", "created_by", "priority", "due_date", "created_at"):
        assert getattr(twice, field) == getattr(task, field)


def test_employee_cannot_toggle_someone_elses_task(service, admin, employee, other_employee):
    task = service.create_task(title="t", assigned_to=other_employee.user_id, created_by=admin.user_id)

    with pytest.raises(AuthorizationError):
        service.toggle_task_status(current_user=employee, task_id=task.task_id)

    # Admins may toggle any task.
    assert service.toggle_task_status(current_user=admin, task_id=task.task_id).status == TaskStatus.COMPLETED


def test_update_rejects_invalid_status(service, admin, employee):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    with pytest.raises(ValidationError):
        service.update_task_status(task.task_id, "archived")


@pytest.mark.parametrize("fields", [{}, {"created_by": "x"}, {"title": "ok", "is_read": True}])
def test_update_rejects_empty_or_unknown_fields(service, admin, employee, fields):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    with pytest.raises(ValidationError):
        service.update_task(task.task_id, fields)


def test_update_and_delete_of_missing_task_raise_not_found(service):
    with pytest.raises(NotFoundError):
        service.update_task("missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        service.update_task_status("missing", "completed")
    with pytest.raises(NotFoundError):
        service.delete_task("missing")


def test_delete_removes_task(service, admin, employee):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    service.delete_task(task.task_id)

    assert service.get_all_tasks() == []
    with pytest.raises(NotFoundError):
        service.delete_task(task.task_id)


def test_gateway_failures_propagate(gateway, service):
    gateway.fail_on.add("select")

    with pytest.raises(PersistenceError):
        service.get_all_tasks()


def test_default_clock_is_timezone_aware_utc(gateway, admin, employee):
    service = TaskService(GatewayTaskRepository(gateway))
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    done = service.update_task_status(task.task_id, "completed")

    assert done.completed_at.tzinfo is not None
    assert abs((datetime.now(timezone.utc) - done.completed_at).total_seconds()) < 60


def test_resaving_completed_status_keeps_the_original_completion_time(gateway, admin, employee):
    stamps = iter([datetime(2026, 1, 1, tzinfo=timezone.utc), datetime(2026, 1, 2, tzinfo=timezone.utc)])
    service = TaskService(GatewayTaskRepository(gateway), clock=lambda: next(stamps))
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    first = service.update_task_status(task.task_id, "completed")
    again = service.update_task(task.task_id, {"status": "completed", "title": "renamed"})
    still = service.update_task_status(task.task_id, TaskStatus.COMPLETED)

    assert first.completed_at == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert again.title == "renamed"
    assert again.completed_at == first.completed_at
    assert still.completed_at == first.completed_at


def test_pending_resave_of_pending_task_leaves_timestamp_empty(service, admin, employee):
    task = service.create_task(title="t", assigned_to=employee.user_id, created_by=admin.user_id)

    same = service.update_task(task.task_id, {"status": "pending", "priority": "high"})

    assert same.status == TaskStatus.PENDING
    assert same.priority == TaskPriority.HIGH
    assert same.completed_at is None
