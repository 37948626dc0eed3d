"""Realtime websocket transport for the change feed.

Speaks the Phoenix channel protocol of the hosted Realtime service: one
``phx_join`` carrying a ``postgres_changes`` config, periodic heartbeats, and
``postgres_changes`` messages whose ``data.record`` is the inserted row.
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
from typing import Any, Optional

import websocket

from ..core.exceptions import SubscriptionError
from .base import ChannelKey, Disposer, RowCallback
from .change_feed import LostCallback, OpenChannel
from .connection import GatewayConfig

logger = logging.getLogger(__name__)

HEARTBEAT_SECONDS = 25
JOIN_TIMEOUT_SECONDS = 10


class RealtimeChannel:
    def __init__(
        self,
        config: GatewayConfig,
        key: ChannelKey,
        on_row: RowCallback,
        on_lost: Optional[LostCallback] = None,
    ):
        self._config = config
        self._key = key
        self._on_row = on_row
        self._on_lost = on_lost
        self._refs = itertools.count(1)
        self._join_ref: Optional[str] = None
        self._stop = threading.Event()
        self.joined = threading.Event()
        # Set once the join is answered either way, or the socket goes down.
        self._settled = threading.Event()
        self.last_error: Optional[str] = None
        self._app = websocket.WebSocketApp(
            config.realtime_url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
        )
        self._thread = threading.Thread(target=self._app.run_forever, name=f"realtime-{key.table}", daemon=True)

    @property
    def topic(self) -> str:
        return f"realtime:{self._key.table}"

    def start(self) -> None:
        try:
            self._thread.start()
        except RuntimeError as e:
            raise SubscriptionError(f"Cannot start realtime channel {self.topic}: {e}") from e

    def wait_joined(self, timeout: float) -> bool:
        self._settled.wait(timeout)
        return self.joined.is_set()

    def close(self) -> None:
        self._stop.set()
        try:
            self._send(self.topic, "phx_leave", {})
        except websocket.WebSocketException:
            pass  # already disconnected
        self._app.close()

    def _send(self, topic: str, event: str, payload: dict) -> str:
        ref = str(next(self._refs))
        message: dict[str, Any] = {"topic": topic, "event": event, "payload": payload, "ref": ref}
        if self._join_ref is not None:
            message["join_ref"] = self._join_ref
        self._app.send(json.dumps(message))
        return ref

    def _on_open(self, ws) -> None:
        payload = {
            "config": {
                "broadcast": {"ack": False, "self": False},
                "presence": {"key": ""},
                "postgres_changes": [
                    {"event": self._key.event, "schema": self._key.schema, "table": self._key.table}
                ],
            },
            "access_token": self._config.api_key,
        }
        # The join frame itself carries no join_ref.
        self._join_ref = None
        self._join_ref = self._send(self.topic, "phx_join", payload)
        threading.Thread(target=self._heartbeat, name=f"realtime-hb-{self._key.table}", daemon=True).start()

    def _heartbeat(self) -> None:
        while not self._stop.wait(HEARTBEAT_SECONDS):
            try:
                self._send("phoenix", "heartbeat", {})
            except websocket.WebSocketException as e:
                logger.warning("Realtime heartbeat on %s stopped: %s", self.topic, e)
                return

    def _on_message(self, ws, message: str) -> None:
        try:
            msg = json.loads(message)
        except ValueError:
            logger.warning("Ignoring malformed realtime frame on %s", self.topic)
            return
        if msg.get("topic") != self.topic:
            return

        event = msg.get("event")
        payload = msg.get("payload") or {}
        if event == "phx_reply" and msg.get("ref") == self._join_ref:
            if payload.get("status") == "ok":
                self.joined.set()
                self._settled.set()
                logger.debug("Joined realtime channel %s", self.topic)
            else:
                self.last_error = json.dumps(payload.get("response"))
                logger.error("Realtime join rejected on %s: %s", self.topic, self.last_error)
                self._settled.set()
        elif event == "postgres_changes":
            data = payload.get("data") or {}
            if data.get("type") == self._key.event:
                self._on_row(data.get("record") or {})
        elif event in {"phx_error", "phx_close"}:
            logger.warning("Realtime channel %s reported %s", self.topic, event)
            if self.joined.is_set() and not self._stop.is_set():
                self.close()
                if self._on_lost is not None:
                    self._on_lost()

    def _on_error(self, ws, error) -> None:
        self.last_error = str(error)
        self._settled.set()
        if not self._stop.is_set():
            logger.warning("Realtime channel %s error: %s", self.topic, error)

    def _on_close(self, ws, status_code, message) -> None:
        unexpected = not self._stop.is_set()
        self._stop.set()
        self._settled.set()
        logger.info("Realtime channel %s closed (%s %s)", self.topic, status_code, message or "")
        if unexpected and self.joined.is_set() and self._on_lost is not None:
            self._on_lost()


def open_realtime_channel(config: GatewayConfig) -> OpenChannel:
    def open_channel(key: ChannelKey, on_row: RowCallback, on_lost: LostCallback) -> Disposer:
        channel = RealtimeChannel(config, key, on_row, on_lost)
        channel.start()
        if not channel.wait_joined(JOIN_TIMEOUT_SECONDS):
            channel.close()
            reason = channel.last_error or f"no join reply within {JOIN_TIMEOUT_SECONDS}s"
            raise SubscriptionError(f"Cannot open realtime channel {channel.topic}: {reason}")
        return channel.close

    return open_channel
