# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from werkzeug.security import generate_password_hash

from src.hr_portal.hr_portal.auth import context as auth_context_module
from src.hr_portal.hr_portal.container import Container, wire_container
from src.hr_portal.hr_portal.core.enums import Role
from src.hr_portal.hr_portal.users.model import CurrentUser, User

from tests.fakes import DEFAULT_PASSWORD, FAST_HASH, FakeIdentityBackend, InMemoryGateway


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """The production work factor makes every registration take ~0.5s; tests use a cheap one."""
    monkeypatch.setattr(auth_context_module, "PASSWORD_HASH_METHOD", FAST_HASH)


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 14, 30, 0, tzinfo=timezone.utc)


@pytest.fixture()
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture()
def identity_backend() -> FakeIdentityBackend:
    return FakeIdentityBackend()


@pytest.fixture()
def container(gateway: InMemoryGateway, identity_backend: FakeIdentityBackend) -> Container:
    return wire_container(gateway, identity_provider_factory=identity_backend.provider)


@pytest.fixture()
def make_user(container: Container):
    """Insert an application user row directly (no provider credential)."""

    def _make(email: str, full_name: str, role: Role = Role.EMPLOYEE, password: str = DEFAULT_PASSWORD) -> User:
        return container.users_repo.create_user(
            email=email,
            full_name=full_name,
            password_hash=generate_password_hash(password, method=FAST_HASH),
            role=role,
        )

    return _make


@pytest.fixture()
def admin(make_user) -> CurrentUser:
    return CurrentUser.from_user(make_user("boss@example.com", "Bea Boss", Role.ADMIN))


@pytest.fixture()
def employee(make_user) -> CurrentUser:
    return CurrentUser.from_user(make_user("ed@example.com", "Ed Employee"))


@pytest.fixture()
def other_employee(make_user) -> CurrentUser:
    return CurrentUser.from_user(make_user("olga@example.com", "Olga Other"))


@pytest.fixture()
def app(monkeypatch, container: Container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.hr_portal.hr_portal.main import create_app

    flask_app = create_app(container)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    return app.test_client()
