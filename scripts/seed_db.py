from __future__ import annotations

import importlib
import logging
import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_portal.hr_portal.auth.context import AuthContext
from src.hr_portal.hr_portal.container import build_container
from src.hr_portal.hr_portal.core.enums import Role
from src.hr_portal.hr_portal.core.exceptions import DuplicateUserError
from src.hr_portal.hr_portal.logging_setup import setup_logging

DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "demo123")

DEMO_USERS = [
    ("admin@example.com", "Demo Admin", Role.ADMIN),
    ("alice@example.com", "Alice Employee", Role.EMPLOYEE),
    ("bob@example.com", "Bob Employee", Role.EMPLOYEE),
]


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(level="INFO")
    container = build_container(gateway_config=dict(settings.GATEWAY_CONFIG))

    for email, full_name, role in DEMO_USERS:
        # Same path as the register page, so both credential stores get the user.
        with AuthContext(container.identity_provider_factory(), container.users_repo) as ctx:
            try:
                ctx.register(email=email, password=DEMO_PASSWORD, full_name=full_name, role=role)
                ctx.logout()
                print(f"created {role.value}: {email}")
            except DuplicateUserError:
                print(f"exists  {role.value}: {email}")

    logging.shutdown()
    print(f"OK: demo users ready at {settings.GATEWAY_CONFIG.get('url')} (password: {DEMO_PASSWORD})")


if __name__ == "__main__":
    main()
