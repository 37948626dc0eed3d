from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_choice, require_email, require_min_length, require_non_empty
from ..core.constants import PASSWORD_HASH_METHOD, PASSWORD_MIN_LENGTH
from ..core.enums import Role
from ..core.exceptions import (
    DuplicateUserError,
    IdentityProviderError,
    InvalidCredentialsError,
    PersistenceError,
    ValidationError,
)
from ..gateway.base import Disposer
from ..identity.provider import IdentityProvider, ProviderSession, SessionEvent
from ..users.model import CurrentUser, User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password or "")
    except (TypeError, ValueError):
        # e.g. placeholder hashes or corrupted values
        return False


class AuthContext:
    """Scoped identity state: who is signed in for one request (or one script run).

    Two credential stores are kept consistent here: the application ``users``
    row (with its own password hash) and the identity provider's credential for
    the same email. The provider credential never sees the real password; its
    password is the application user id.

    Lifecycle: ``bootstrap()`` loads the identity from an existing provider
    session and starts listening to session changes; ``close()`` stops
    listening, after which late session events are ignored.
    """

    def __init__(self, provider: IdentityProvider, users: UserRepository):
        self._provider = provider
        self._users = users
        self._user: Optional[CurrentUser] = None
        self._loading = True
        self._alive = True
        self._unsubscribe: Optional[Disposer] = None

    @property
    def user(self) -> Optional[CurrentUser]:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def provider(self) -> IdentityProvider:
        return self._provider

    def __enter__(self) -> "AuthContext":
        self.bootstrap()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def bootstrap(self) -> Optional[CurrentUser]:
        try:
            session = self._provider.get_session()
            if session is not None and session.email:
                self._load_identity(session.email)
        finally:
            self._loading = False
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.on_session_change(self._on_session_change)
        return self._user

    def close(self) -> None:
        self._alive = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _load_identity(self, email: str) -> None:
        user = self._users.get_by_email(_normalize_email(email))
        if user is not None and self._alive:
            self._user = CurrentUser.from_user(user)

    def _on_session_change(self, event: SessionEvent, session: Optional[ProviderSession]) -> None:
        if not self._alive:
            return
        if session is None or not session.email:
            self._user = None
            return
        try:
            self._load_identity(session.email)
        except PersistenceError as e:
            logger.warning("Identity reload after %s failed: %s", event.value, e)

    def register(
        self,
        *,
        email: str,
        password: str,
        full_name: str,
        role: Role = Role.EMPLOYEE,
        confirm_password: Optional[str] = None,
    ) -> CurrentUser:
        full_name = require_non_empty(full_name, "Full name")
        email = _normalize_email(require_email(email))
        require_min_length(password, "Password", PASSWORD_MIN_LENGTH)
        if confirm_password is not None and confirm_password != password:
            raise ValidationError("Passwords do not match")
        role = require_choice(role, Role, "Role")

        password_hash = generate_password_hash(password, method=PASSWORD_HASH_METHOD)

        if self._users.get_by_email(email):
            raise DuplicateUserError("User already exists")

        user = self._users.create_user(email=email, full_name=full_name, password_hash=password_hash, role=role)
        self._provision_at_registration(user)

        self._user = CurrentUser.from_user(user)
        logger.info("Registered %s user %s", role.value, user.user_id)
        return self._user

    def _provision_at_registration(self, user: User) -> None:
        # Phase two of the dual write. A failure leaves the app row in place;
        # login() recreates the provider credential on first sign-in.
        try:
            if self._provider.sign_up(user.email, user.user_id) is None:
                self._provider.sign_in(user.email, user.user_id)
        except IdentityProviderError as e:
            logger.warning("Provider credential for user %s not created at registration: %s", user.user_id, e)

    def _follow_up_sign_in(self, user: User) -> None:
        # Sign-up returned no session, e.g. while the email awaits confirmation.
        try:
            self._provider.sign_in(user.email, user.user_id)
        except IdentityProviderError as e:
            logger.warning("Provider session for user %s not available after sign-up: %s", user.user_id, e)

    def login(self, email: str, password: str) -> CurrentUser:
        email = _normalize_email(email)
        user = self._users.get_by_email(email) if email else None
        if user is None or not _password_matches(user.password_hash, password):
            raise InvalidCredentialsError(INVALID_CREDENTIALS)

        try:
            self._provider.sign_in(user.email, user.user_id)
        except IdentityProviderError as e:
            # Legacy row or an earlier partial registration: create the credential now.
            logger.warning("Provider sign-in failed for user %s (%s); creating provider credential", user.user_id, e)
            # Only a failed sign-up refuses the login.
            if self._provider.sign_up(user.email, user.user_id) is None:
                self._follow_up_sign_in(user)

        self._user = CurrentUser.from_user(user)
        logger.info("User %s signed in", user.user_id)
        return self._user

    def logout(self) -> None:
        try:
            self._provider.sign_out()
        finally:
            self._user = None
