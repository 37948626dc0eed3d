from __future__ import annotations

from flask import Flask, redirect, render_template

from ..auth.decorators import admin_required, current_user, employee_required, login_required
from ..auth.guard import home_path_for
from ..container import Container
from ..core.constants import DEFAULT_RECENT_TASKS
from ..core.enums import TaskStatus


def register(app: Flask, container: Container) -> None:
    @app.route("/", endpoint="index")
    @login_required
    def index():
        return redirect(home_path_for(current_user().role))

    @app.route("/dashboard", endpoint="dashboard")
    @admin_required
    def admin_dashboard():
        tasks = container.task_service.get_all_tasks()
        return render_template(
            "dashboard/admin.html",
            employee_count=container.user_service.count_employees(),
            task_stats=container.task_service.get_task_statistics(),
            leave_stats=container.leave_service.get_leave_statistics(),
            recent_tasks=list(tasks)[:DEFAULT_RECENT_TASKS],
            user_names=container.user_service.user_names(),
            active_page="dashboard",
        )

    @app.route("/employee-dashboard", endpoint="employee_dashboard")
    @employee_required
    def employee_dashboard():
        user = current_user()
        tasks = container.task_service.get_tasks_by_employee(user.user_id)
        return render_template(
            "dashboard/employee.html",
            pending_tasks=[t for t in tasks if t.status == TaskStatus.PENDING],
            completed_tasks=[t for t in tasks if t.status == TaskStatus.COMPLETED],
            stats=container.task_service.get_task_statistics(user.user_id),
            active_page="employee_dashboard",
        )

    @app.route("/employees", endpoint="employees")
    @admin_required
    def employees():
        return render_template(
            "employees.html",
            employees=container.user_service.list_employees(),
            active_page="employees",
        )
