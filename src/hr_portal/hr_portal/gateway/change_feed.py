from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, List, Tuple

from .base import ChannelKey, Disposer, Row, RowCallback

logger = logging.getLogger(__name__)

LostCallback = Callable[[], None]
OpenChannel = Callable[[ChannelKey, RowCallback, LostCallback], Disposer]


class ChangeFeed:
    """Local publish/subscribe over upstream change-feed channels.

    One upstream channel is opened per ``ChannelKey`` on the first subscription
    and closed when its last listener is released. Every listener receives
    every event of its key (fan-out, not competing consumers), in the order the
    upstream delivers them.

    An upstream that dies on its own reports through its ``on_lost`` callback;
    the key is then forgotten and the next ``subscribe`` opens a fresh channel,
    which also serves the listeners still attached.
    """

    def __init__(self, open_channel: OpenChannel):
        self._open_channel = open_channel
        self._lock = threading.RLock()
        self._listeners: Dict[ChannelKey, Dict[int, RowCallback]] = {}
        self._upstream: Dict[ChannelKey, Tuple[object, Disposer]] = {}
        self._ids = itertools.count(1)

    def subscribe(self, key: ChannelKey, callback: RowCallback) -> Disposer:
        with self._lock:
            if key not in self._upstream:
                token = object()
                # May raise SubscriptionError; nothing is registered in that case.
                close = self._open_channel(
                    key,
                    lambda row: self.publish(key, row),
                    lambda: self._lost(key, token),
                )
                self._upstream[key] = (token, close)
                logger.info("Opened change-feed channel %s.%s (%s)", key.schema, key.table, key.event)
            listener_id = next(self._ids)
            self._listeners.setdefault(key, {})[listener_id] = callback

        released = threading.Event()

        def dispose() -> None:
            if released.is_set():
                return
            released.set()
            self._release(key, listener_id)

        return dispose

    def _lost(self, key: ChannelKey, token: object) -> None:
        with self._lock:
            entry = self._upstream.get(key)
            if entry is None or entry[0] is not token:
                return
            del self._upstream[key]
        logger.warning("Change-feed channel %s.%s (%s) lost; reopening on next subscribe", key.schema, key.table, key.event)

    def _release(self, key: ChannelKey, listener_id: int) -> None:
        close = None
        with self._lock:
            listeners = self._listeners.get(key)
            if listeners is None:
                return
            listeners.pop(listener_id, None)
            if not listeners:
                del self._listeners[key]
                entry = self._upstream.pop(key, None)
                close = entry[1] if entry else None
        if close is not None:
            close()
            logger.info("Closed change-feed channel %s.%s (%s)", key.schema, key.table, key.event)

    def publish(self, key: ChannelKey, row: Row) -> None:
        with self._lock:
            callbacks: List[RowCallback] = list(self._listeners.get(key, {}).values())
        for callback in callbacks:
            try:
                callback(dict(row))
            except Exception:
                logger.exception("Change-feed listener failed for %s.%s", key.schema, key.table)

    def listener_count(self, key: ChannelKey) -> int:
        with self._lock:
            return len(self._listeners.get(key, {}))

    def close(self) -> None:
        with self._lock:
            closers = [close for _, close in self._upstream.values()]
            self._upstream.clear()
            self._listeners.clear()
        for close in closers:
            close()
