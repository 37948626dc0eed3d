"""Route guard evaluated on every navigation.

Pure and stateless: the decision depends only on the identity, the loading
flag and the requested path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.constants import (
    ADMIN_DASHBOARD_PATH,
    ADMIN_ONLY_PATHS,
    EMPLOYEE_DASHBOARD_PATH,
    LOGIN_PATH,
    REGISTER_PATH,
)
from ..core.enums import Role
from ..users.model import CurrentUser

PUBLIC_PATHS = frozenset({LOGIN_PATH, REGISTER_PATH})


class RouteAction(str, Enum):
    WAIT = "wait"
    REDIRECT = "redirect"
    ALLOW = "allow"


@dataclass(frozen=True)
class RouteDecision:
    action: RouteAction
    location: Optional[str] = None

    @classmethod
    def allow(cls) -> "RouteDecision":
        return cls(RouteAction.ALLOW)

    @classmethod
    def wait(cls) -> "RouteDecision":
        return cls(RouteAction.WAIT)

    @classmethod
    def redirect(cls, location: str) -> "RouteDecision":
        return cls(RouteAction.REDIRECT, location)


def normalize_path(path: str) -> str:
    return (path or "/").rstrip("/") or "/"


def is_public_path(path: str) -> bool:
    path = normalize_path(path)
    return path in PUBLIC_PATHS or path == "/static" or path.startswith("/static/")


def home_path_for(role: Role) -> str:
    return ADMIN_DASHBOARD_PATH if role == Role.ADMIN else EMPLOYEE_DASHBOARD_PATH


def evaluate_route(identity: Optional[CurrentUser], path: str, *, loading: bool = False) -> RouteDecision:
    if loading:
        return RouteDecision.wait()
    if identity is None:
        return RouteDecision.redirect(LOGIN_PATH)

    path = normalize_path(path)
    if identity.role == Role.EMPLOYEE and (path in ADMIN_ONLY_PATHS or path == ADMIN_DASHBOARD_PATH):
        return RouteDecision.redirect(EMPLOYEE_DASHBOARD_PATH)
    if identity.role == Role.ADMIN and path == EMPLOYEE_DASHBOARD_PATH:
        return RouteDecision.redirect(ADMIN_DASHBOARD_PATH)
    return RouteDecision.allow()
