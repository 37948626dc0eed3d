from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.decorators import admin_required, current_user, login_required, safe_next
from ..auth.guard import home_path_for
from ..container import Container
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, DomainError, ValidationError

logger = logging.getLogger(__name__)

TASK_FORM_FIELDS = ("title", "description", "assigned_to", "priority", "due_date")


def register(app: Flask, container: Container) -> None:
    tasks = container.task_service

    def _render_tasks(*, form=None, form_error=None, editing=None, status=200):
        all_tasks = tasks.get_all_tasks()
        return (
            render_template(
                "tasks/index.html",
                pending_tasks=[t for t in all_tasks if t.status == TaskStatus.PENDING],
                completed_tasks=[t for t in all_tasks if t.status == TaskStatus.COMPLETED],
                stats=tasks.get_task_statistics(),
                employees=container.user_service.list_employees(),
                user_names=container.user_service.user_names(),
                priorities=list(TaskPriority),
                form=form or {},
                form_error=form_error,
                editing=editing,
                active_page="tasks",
            ),
            status,
        )

    @app.route("/tasks", methods=["GET"], endpoint="tasks")
    @admin_required
    def task_list():
        editing, form = None, None
        edit_id = request.args.get("edit")
        if edit_id:
            try:
                editing = tasks.get_task(edit_id)
                form = {
                    "title": editing.title,
                    "description": editing.description,
                    "assigned_to": editing.assigned_to,
                    "priority": editing.priority.value,
                    "due_date": editing.due_date.isoformat() if editing.due_date else "",
                }
            except DomainError as e:
                flash(str(e), "danger")
        return _render_tasks(form=form, editing=editing)

    @app.route("/tasks", methods=["POST"], endpoint="create_task")
    @admin_required
    def create_task():
        form = {k: request.form.get(k, "") for k in TASK_FORM_FIELDS}
        try:
            tasks.create_task(
                title=form["title"],
                description=form["description"],
                assigned_to=form["assigned_to"],
                created_by=current_user().user_id,
                priority=form["priority"] or TaskPriority.MEDIUM,
                due_date=form["due_date"] or None,
            )
            flash("Task created.", "success")
            return redirect(url_for("tasks"))
        except ValidationError as e:
            return _render_tasks(form=form, form_error=str(e), status=400)
        except DomainError as e:
            logger.exception("Task creation failed")
            flash(f"Failed to save task: {e}", "danger")
        return redirect(url_for("tasks"))

    @app.route("/tasks/<task_id>/update", methods=["POST"], endpoint="update_task")
    @admin_required
    def update_task(task_id: str):
        fields = {k: request.form[k] for k in TASK_FORM_FIELDS if k in request.form}
        if request.form.get("status"):
            fields["status"] = request.form["status"]
        try:
            tasks.update_task(task_id, fields)
            flash("Task updated.", "success")
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("tasks", edit=task_id))
        except DomainError as e:
            logger.exception("Task %s update failed", task_id)
            flash(f"Failed to update task: {e}", "danger")
        return redirect(url_for("tasks"))

    @app.route("/tasks/<task_id>/toggle", methods=["POST"], endpoint="toggle_task")
    @login_required
    def toggle_task(task_id: str):
        user = current_user()
        try:
            task = tasks.toggle_task_status(current_user=user, task_id=task_id)
            flash(f"Task marked as {task.status.value}.", "success")
        except AuthorizationError as e:
            flash(str(e), "danger")
        except DomainError as e:
            logger.exception("Task %s toggle failed", task_id)
            flash(f"Failed to update task: {e}", "danger")
        return redirect(safe_next(request.form.get("next")) or home_path_for(user.role))

    @app.route("/tasks/<task_id>/delete", methods=["POST"], endpoint="delete_task")
    @admin_required
    def delete_task(task_id: str):
        try:
            tasks.delete_task(task_id)
            flash("Task deleted.", "success")
        except DomainError as e:
            logger.exception("Task %s delete failed", task_id)
            flash(f"Failed to delete task: {e}", "danger")
        return redirect(safe_next(request.form.get("next")) or url_for("tasks"))
