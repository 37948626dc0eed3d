"""Example: use the service layer without Flask.

Controllers stay thin; the business rules live in the services.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_portal.hr_portal.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(gateway_config=settings.GATEWAY_CONFIG)

    stats = container.task_service.get_task_statistics()
    print(f"tasks: {stats.total} total, {stats.completed} completed ({stats.percentage}%)")
    for n in container.notification_service.get_notifications(limit=5):
        print(f"[{'x' if n.is_read else ' '}] {n.title}: {n.message}")


if __name__ == "__main__":
    main()
