from __future__ import annotations

import logging

from flask import Flask, flash, redirect, render_template, request, url_for

from ..auth.decorators import admin_required, current_user, employee_required, login_required
from ..container import Container
from ..core.enums import LeaveStatus
from ..core.exceptions import AuthorizationError, DomainError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    leaves = container.leave_service

    @app.route("/leave", methods=["GET"], endpoint="leave")
    @login_required
    def leave_index():
        user = current_user()
        if user.is_admin:
            status_s = request.args.get("status") or ""
            status = LeaveStatus(status_s) if status_s in {s.value for s in LeaveStatus} else None
            return render_template(
                "leave/index.html",
                leaves=leaves.list_leaves(status),
                stats=leaves.get_leave_statistics(),
                user_names=container.user_service.user_names(),
                status_filter=status,
                statuses=list(LeaveStatus),
                active_page="leave",
            )
        return render_template(
            "leave/index.html",
            leaves=leaves.list_my_leaves(employee_id=user.user_id),
            active_page="leave",
        )

    @app.route("/leave", methods=["POST"], endpoint="apply_leave")
    @employee_required
    def apply_leave():
        user = current_user()
        try:
            leaves.create_leave(
                current_role=user.role,
                employee_id=user.user_id,
                start_date=request.form.get("start_date", ""),
                end_date=request.form.get("end_date", ""),
                reason=request.form.get("reason", ""),
            )
            flash("Leave request submitted.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except DomainError:
            logger.exception("Leave request failed for %s", user.user_id)
            flash("System error while submitting the leave request", "danger")
        return redirect(url_for("leave"))

    def _decide(leave_id: str, approve: bool):
        user = current_user()
        action = leaves.approve_leave if approve else leaves.reject_leave
        try:
            action(
                current_role=user.role,
                admin_user_id=user.user_id,
                leave_id=leave_id,
                admin_note=request.form.get("admin_note", ""),
            )
            flash("Leave request approved." if approve else "Leave request rejected.", "success")
        except (ValidationError, AuthorizationError) as e:
            flash(str(e), "danger")
        except DomainError as e:
            logger.exception("Leave decision failed for %s", leave_id)
            flash(f"Failed to update leave request: {e}", "danger")
        return redirect(url_for("leave"))

    @app.route("/leave/<leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @admin_required
    def approve_leave(leave_id: str):
        return _decide(leave_id, approve=True)

    @app.route("/leave/<leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @admin_required
    def reject_leave(leave_id: str):
        return _decide(leave_id, approve=False)
