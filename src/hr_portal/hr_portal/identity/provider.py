from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from ..gateway.base import Disposer

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass(frozen=True)
class ProviderSession:
    """Credential record issued by the identity provider (not the app user row)."""

    access_token: str
    email: str
    refresh_token: Optional[str] = None
    provider_user_id: str = ""
    expires_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["ProviderSession"]:
        if not data or not data.get("access_token") or not data.get("email"):
            return None
        expires_at = data.get("expires_at")
        return cls(
            access_token=str(data["access_token"]),
            email=str(data["email"]),
            refresh_token=data.get("refresh_token"),
            provider_user_id=str(data.get("provider_user_id") or ""),
            expires_at=int(expires_at) if expires_at is not None else None,
        )


SessionListener = Callable[[SessionEvent, Optional[ProviderSession]], None]


class IdentityProvider(Protocol):
    """Hosted authentication service, holding the client-side session."""

    def restore(self, data: Optional[Mapping[str, Any]]) -> None:
        """Seed the client-side session from persisted tokens (no event)."""

        raise NotImplementedError

    def export_session(self) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def get_session(self) -> Optional[ProviderSession]:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> ProviderSession:
        raise NotImplementedError

    def sign_up(self, email: str, password: str) -> Optional[ProviderSession]:
        """Create a credential; returns a session when the provider issues one."""

        raise NotImplementedError

    def sign_out(self) -> None:
        raise NotImplementedError

    def on_session_change(self, listener: SessionListener) -> Disposer:
        raise NotImplementedError


class SessionListeners:
    """Registry of session-change listeners shared by provider implementations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: Dict[int, SessionListener] = {}
        self._ids = itertools.count(1)

    def add(self, listener: SessionListener) -> Disposer:
        with self._lock:
            listener_id = next(self._ids)
            self._listeners[listener_id] = listener

        def dispose() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return dispose

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, event: SessionEvent, session: Optional[ProviderSession]) -> None:
        with self._lock:
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener failed on %s", event.value)
