from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

import requests


@dataclass
class GatewayConfig:
    url: str
    api_key: str
    timeout: float = 10.0

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.base_url}/auth/v1"

    @property
    def realtime_url(self) -> str:
        ws_base = self.base_url.replace("https://", "wss://", 1).replace("http://", "ws://", 1)
        query = urlencode({"apikey": self.api_key, "vsn": "1.0.0"})
        return f"{ws_base}/realtime/v1/websocket?{query}"


class GatewayConnection:
    """HTTP session factory for the hosted backend.

    Note: We create short-lived sessions per operation (safe for threaded Flask apps).
    """

    def __init__(self, config: GatewayConfig):
        self._config = config

    @property
    def config(self) -> GatewayConfig:
        return self._config

    def connect(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "apikey": self._config.api_key,
                "Authorization": f"Bearer {self._config.api_key}",
            }
        )
        return session
