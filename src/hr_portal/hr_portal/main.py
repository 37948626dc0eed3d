from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, render_template

from config import get_settings_module

from .auth.controller import register as register_auth
from .container import Container, build_container
from .core.constants import DEFAULT_NOTIFICATION_LIMIT, DEFAULT_SESSION_DAYS
from .dashboard.controller import register as register_dashboard
from .leaves.controller import register as register_leaves
from .logging_setup import setup_logging
from .notifications.controller import register as register_notifications
from .tasks.controller import register as register_tasks

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["NOTIFICATION_PAGE_SIZE"] = int(getattr(settings, "NOTIFICATION_PAGE_SIZE", DEFAULT_NOTIFICATION_LIMIT))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    setup_logging(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        log_dir=getattr(settings, "LOG_DIR", None),
    )

    gateway_config = getattr(settings, "GATEWAY_CONFIG")
    if app.config["DEBUG"]:
        logger.info("settings=%s gateway=%s", settings_module, gateway_config.get("url"))

    if container is None:
        container = build_container(gateway_config=gateway_config)
    app.extensions["hr_portal.container"] = container

    register_auth(app, container)
    register_dashboard(app, container)
    register_tasks(app, container)
    register_leaves(app, container)
    register_notifications(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return render_template("404.html"), 404

    return app
