from __future__ import annotations

from src.hr_portal.hr_portal.core.enums import Role


def test_directory_lists_employees_and_names_every_user(container, admin, employee, other_employee):
    users = container.user_service

    assert [u.full_name for u in users.list_employees()] == ["Ed Employee", "Olga Other"]
    assert users.count_employees() == 2
    assert users.user_names() == {
        admin.user_id: "Bea Boss",
        employee.user_id: "Ed Employee",
        other_employee.user_id: "Olga Other",
    }


def test_get_user_round_trips_stored_row(container, gateway, admin):
    user = container.user_service.get_user(admin.user_id)

    assert user.role is Role.ADMIN
    assert user.email == "boss@example.com"
    assert user.password_hash.startswith("pbkdf2:sha256")
    assert gateway.rows("users")[0]["role"] == "admin"
    assert container.user_service.get_user("missing") is None
