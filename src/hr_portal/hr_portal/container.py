from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .gateway.base import DataGateway
from .gateway.connection import GatewayConfig, GatewayConnection
from .gateway.postgrest_gateway import PostgrestGateway
from .identity.gotrue_provider import GoTrueIdentityProvider
from .identity.provider import IdentityProvider
from .leaves.gateway_leave_repository import GatewayLeaveRepository
from .leaves.service import LeaveService
from .notifications.gateway_notification_repository import GatewayNotificationRepository
from .notifications.service import NotificationService
from .tasks.gateway_task_repository import GatewayTaskRepository
from .tasks.service import TaskService
from .users.gateway_user_repository import GatewayUserRepository
from .users.service import UserService

IdentityProviderFactory = Callable[[], IdentityProvider]


@dataclass(frozen=True)
class Container:
    gateway: DataGateway

    users_repo: GatewayUserRepository
    tasks_repo: GatewayTaskRepository
    notifications_repo: GatewayNotificationRepository
    leaves_repo: GatewayLeaveRepository

    user_service: UserService
    task_service: TaskService
    notification_service: NotificationService
    leave_service: LeaveService

    # Identity providers hold one client-side session, so each request gets its own.
    identity_provider_factory: IdentityProviderFactory


def wire_container(gateway: DataGateway, *, identity_provider_factory: IdentityProviderFactory) -> Container:
    users_repo = GatewayUserRepository(gateway)
    tasks_repo = GatewayTaskRepository(gateway)
    notifications_repo = GatewayNotificationRepository(gateway)
    leaves_repo = GatewayLeaveRepository(gateway)

    return Container(
        gateway=gateway,
        users_repo=users_repo,
        tasks_repo=tasks_repo,
        notifications_repo=notifications_repo,
        leaves_repo=leaves_repo,
        user_service=UserService(users_repo),
        task_service=TaskService(tasks_repo),
        notification_service=NotificationService(notifications_repo),
        leave_service=LeaveService(leaves_repo),
        identity_provider_factory=identity_provider_factory,
    )


def build_container(*, gateway_config: dict) -> Container:
    config = GatewayConfig(
        url=str(gateway_config["url"]),
        api_key=str(gateway_config["api_key"]),
        timeout=float(gateway_config.get("timeout", 10.0)),
    )
    conn = GatewayConnection(config)
    gateway = PostgrestGateway(conn)

    return wire_container(gateway, identity_provider_factory=lambda: GoTrueIdentityProvider(conn))
