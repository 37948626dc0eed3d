from __future__ import annotations

import json
import logging
import queue
from typing import Optional

from flask import Flask, Response, flash, jsonify, redirect, render_template, url_for

from ..auth.decorators import current_user, login_required
from ..container import Container
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT
from ..core.exceptions import DomainError, NotFoundError, SubscriptionError
from .model import Notification

logger = logging.getLogger(__name__)

KEEPALIVE_SECONDS = 15


def _sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def _recipient_scope() -> Optional[str]:
    """Admins see every notification; employees only their own."""
    user = current_user()
    return None if user.is_admin else user.user_id


def register(app: Flask, container: Container) -> None:
    notifications = container.notification_service

    @app.route("/notifications", methods=["GET"], endpoint="notifications")
    @login_required
    def notification_list():
        scope = _recipient_scope()
        limit = int(app.config.get("NOTIFICATION_PAGE_SIZE", DEFAULT_NOTIFICATION_LIMIT))
        return render_template(
            "notifications/index.html",
            notifications=notifications.get_notifications(limit=limit, employee_id=scope),
            unread_count=notifications.get_unread_count(scope),
            active_page="notifications",
        )

    @app.route("/notifications/<notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @login_required
    def mark_read(notification_id: str):
        try:
            notifications.mark_as_read(notification_id, _recipient_scope())
        except NotFoundError:
            flash("Notification not found.", "warning")
        except DomainError as e:
            logger.exception("Marking notification %s as read failed", notification_id)
            flash(f"Failed to update notification: {e}", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/read-all", methods=["POST"], endpoint="mark_all_notifications_read")
    @login_required
    def mark_all_read():
        try:
            updated = notifications.mark_all_as_read(_recipient_scope())
            flash(f"Marked {updated} notification(s) as read.", "success")
        except DomainError as e:
            logger.exception("Marking all notifications as read failed")
            flash(f"Failed to update notifications: {e}", "danger")
        return redirect(url_for("notifications"))

    @app.route("/notifications/<notification_id>/delete", methods=["POST"], endpoint="delete_notification")
    @login_required
    def delete(notification_id: str):
        try:
            notifications.delete_notification(notification_id, _recipient_scope())
            flash("Notification deleted.", "success")
        except NotFoundError:
            flash("Notification not found.", "warning")
        except DomainError as e:
            logger.exception("Deleting notification %s failed", notification_id)
            flash(f"Failed to delete notification: {e}", "danger")
        return redirect(url_for("notifications"))

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="api_unread_count")
    @login_required
    def api_unread_count():
        try:
            return jsonify({"count": notifications.get_unread_count(_recipient_scope())})
        except DomainError as e:
            logger.warning("Unread count unavailable: %s", e)
            return jsonify({"error": str(e)}), 502

    @app.route("/notifications/stream", methods=["GET"], endpoint="notification_stream")
    @login_required
    def notification_stream():
        scope = _recipient_scope()
        events: "queue.Queue[Notification]" = queue.Queue()

        try:
            unsubscribe = notifications.subscribe_to_notifications(events.put, scope)
        except SubscriptionError as e:
            logger.error("Notification stream unavailable: %s", e)
            return jsonify({"error": "stream unavailable"}), 503

        def unread_event() -> str:
            try:
                return _sse("unread", {"count": notifications.get_unread_count(scope)})
            except DomainError as e:
                logger.warning("Unread count unavailable for stream: %s", e)
                return _sse("error", {"error": "unread count unavailable"})

        def generate():
            try:
                yield unread_event()
                while True:
                    try:
                        notification = events.get(timeout=KEEPALIVE_SECONDS)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield _sse("notification", notification.to_dict())
                    yield unread_event()
            finally:
                unsubscribe()

        response = Response(generate(), mimetype="text/event-stream")
        response.headers["Cache-Control"] = "no-cache"
        response.headers["X-Accel-Buffering"] = "no"
        # Runs even when the client disconnects before the generator starts.
        response.call_on_close(unsubscribe)
        return response
