from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, Optional

from ..core.exceptions import IdentityProviderError
from ..gateway.base import Disposer
from ..gateway.connection import GatewayConnection
from ..gateway.rest_base import http_session, send
from .provider import IdentityProvider, ProviderSession, SessionEvent, SessionListener, SessionListeners

logger = logging.getLogger(__name__)

# Refresh slightly before the access token actually expires.
EXPIRY_MARGIN_SECONDS = 10


class GoTrueIdentityProvider(IdentityProvider):
    """Client for the hosted GoTrue auth API.

    One instance holds one client-side session, so create one per request scope.
    """

    def __init__(self, conn_factory: GatewayConnection):
        self._conn_factory = conn_factory
        self._session: Optional[ProviderSession] = None
        self._listeners = SessionListeners()

    def _url(self, path: str) -> str:
        return f"{self._conn_factory.config.auth_url}/{path}"

    def _post(self, path: str, payload: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        with http_session(self._conn_factory) as s:
            r = send(
                s,
                "POST",
                self._url(path),
                timeout=self._conn_factory.config.timeout,
                error_cls=IdentityProviderError,
                json=payload,
                **kwargs,
            )
            return r.json() if r.content else {}

    @staticmethod
    def _session_from(data: Mapping[str, Any]) -> Optional[ProviderSession]:
        if not data.get("access_token"):
            return None
        user = data.get("user") or {}
        expires_at = data.get("expires_at")
        if expires_at is None and data.get("expires_in") is not None:
            expires_at = int(time.time()) + int(data["expires_in"])
        return ProviderSession(
            access_token=data["access_token"],
            email=str(user.get("email") or ""),
            refresh_token=data.get("refresh_token"),
            provider_user_id=str(user.get("id") or ""),
            expires_at=int(expires_at) if expires_at is not None else None,
        )

    def restore(self, data: Optional[Mapping[str, Any]]) -> None:
        self._session = ProviderSession.from_dict(data)

    def export_session(self) -> Optional[Dict[str, Any]]:
        return self._session.to_dict() if self._session else None

    def get_session(self) -> Optional[ProviderSession]:
        session = self._session
        if session is None:
            return None
        if session.expires_at is not None and time.time() >= session.expires_at - EXPIRY_MARGIN_SECONDS:
            return self._refresh(session)
        return session

    def _refresh(self, session: ProviderSession) -> Optional[ProviderSession]:
        if not session.refresh_token:
            self._session = None
            self._listeners.emit(SessionEvent.SIGNED_OUT, None)
            return None
        try:
            data = self._post("token?grant_type=refresh_token", {"refresh_token": session.refresh_token})
        except IdentityProviderError as e:
            logger.warning("Session refresh failed for %s: %s", session.email, e)
            self._session = None
            self._listeners.emit(SessionEvent.SIGNED_OUT, None)
            return None
        self._session = self._session_from(data)
        self._listeners.emit(SessionEvent.TOKEN_REFRESHED, self._session)
        return self._session

    def sign_in(self, email: str, password: str) -> ProviderSession:
        data = self._post("token?grant_type=password", {"email": email, "password": password})
        session = self._session_from(data)
        if session is None:
            raise IdentityProviderError("Sign-in response carried no session")
        self._session = session
        self._listeners.emit(SessionEvent.SIGNED_IN, session)
        return session

    def sign_up(self, email: str, password: str) -> Optional[ProviderSession]:
        data = self._post("signup", {"email": email, "password": password})
        session = self._session_from(data)
        if session is not None:
            self._session = session
            self._listeners.emit(SessionEvent.SIGNED_IN, session)
        return session

    def sign_out(self) -> None:
        session, self._session = self._session, None
        try:
            if session is not None:
                self._post("logout", {}, headers={"Authorization": f"Bearer {session.access_token}"})
        finally:
            self._listeners.emit(SessionEvent.SIGNED_OUT, None)

    def on_session_change(self, listener: SessionListener) -> Disposer:
        return self._listeners.add(listener)
