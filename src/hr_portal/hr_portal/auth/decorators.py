from __future__ import annotations

from functools import wraps
from typing import Optional
from urllib.parse import urlparse

from flask import flash, g, redirect, render_template, url_for

from ..core.enums import Role
from ..users.model import CurrentUser
from .context import AuthContext


def auth_context() -> Optional[AuthContext]:
    return g.get("auth")


def current_user() -> Optional[CurrentUser]:
    ctx = auth_context()
    return ctx.user if ctx is not None else None


def safe_next(target: Optional[str]) -> Optional[str]:
    """Accept only same-site relative paths as post-login redirects."""
    if not target:
        return None
    parsed = urlparse(target)
    if parsed.scheme or parsed.netloc or not target.startswith("/") or target.startswith("//"):
        return None
    return target


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            flash("Please sign in to continue.", "warning")
            return redirect(url_for("login"))
        return view(*args, **kwargs)

    return wrapper


def _role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                return redirect(url_for("login"))
            if user.role != role:
                return render_template("403.html", current_user=user), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = _role_required(Role.ADMIN)
employee_required = _role_required(Role.EMPLOYEE)
