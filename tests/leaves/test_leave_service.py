from __future__ import annotations

from datetime import date

import pytest

from src.hr_portal.hr_portal.core.enums import LeaveStatus, Role
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_portal.hr_portal.leaves.gateway_leave_repository import GatewayLeaveRepository
from src.hr_portal.hr_portal.leaves.model import LeaveStatistics
from src.hr_portal.hr_portal.leaves.service import LeaveService


@pytest.fixture()
def service(gateway, fixed_now) -> LeaveService:
    return LeaveService(GatewayLeaveRepository(gateway), clock=lambda: fixed_now)


def _apply(service, employee, start="2026-04-01", end="2026-04-03", reason="Family trip"):
    return service.create_leave(
        current_role=employee.role,
        employee_id=employee.user_id,
        start_date=start,
        end_date=end,
        reason=reason,
    )


def test_employee_applies_for_leave(service, employee):
    leave = _apply(service, employee)

    assert leave.status == LeaveStatus.PENDING
    assert (leave.start_date, leave.end_date) == (date(2026, 4, 1), date(2026, 4, 3))
    assert leave.days == 3
    assert [l.leave_id for l in service.list_my_leaves(employee_id=employee.user_id)] == [leave.leave_id]


def test_only_employees_apply(service, admin):
    with pytest.raises(AuthorizationError):
        _apply(service, admin)


@pytest.mark.parametrize(
    "kw, message",
    [
        ({"start": "2026-04-03", "end": "2026-04-01"}, "on or after"),
        ({"reason": "  "}, "Reason is required"),
        ({"start": ""}, "required"),
        ({"end": "April 3"}, "YYYY-MM-DD"),
    ],
)
def test_leave_validation(service, employee, kw, message):
    with pytest.raises(ValidationError, match=message):
        _apply(service, employee, **kw)


def test_admin_approves_pending_leave(service, admin, employee, fixed_now):
    leave = _apply(service, employee)

    service.approve_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id=leave.leave_id, admin_note=" enjoy ")

    decided = service.list_leaves(LeaveStatus.APPROVED)[0]
    assert decided.decided_by == admin.user_id
    assert decided.decided_at == fixed_now
    assert decided.admin_note == "enjoy"


def test_decided_leave_cannot_be_decided_again(service, admin, employee):
    leave = _apply(service, employee)
    service.reject_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id=leave.leave_id)

    with pytest.raises(ValidationError, match="already been processed"):
        service.approve_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id=leave.leave_id)


def test_employee_cannot_decide(service, employee):
    leave = _apply(service, employee)

    with pytest.raises(AuthorizationError):
        service.approve_leave(current_role=Role.EMPLOYEE, admin_user_id=employee.user_id, leave_id=leave.leave_id)


def test_unknown_leave_is_not_found(service, admin):
    with pytest.raises(NotFoundError):
        service.reject_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id="missing")


def test_statistics_and_status_filter(service, admin, employee, other_employee):
    a = _apply(service, employee)
    b = _apply(service, other_employee)
    _apply(service, employee, reason="Dentist")
    service.approve_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id=a.leave_id)
    service.reject_leave(current_role=Role.ADMIN, admin_user_id=admin.user_id, leave_id=b.leave_id)

    assert service.get_leave_statistics() == LeaveStatistics(applied=3, approved=1, pending=1, rejected=1)
    assert [l.reason for l in service.list_leaves(LeaveStatus.PENDING)] == ["Dentist"]
    assert len(service.list_leaves()) == 3
