from __future__ import annotations

import json

import pytest

from src.hr_portal.hr_portal.core.exceptions import SubscriptionError
from src.hr_portal.hr_portal.gateway import realtime as realtime_module
from src.hr_portal.hr_portal.gateway.base import ChannelKey
from src.hr_portal.hr_portal.gateway.change_feed import ChangeFeed
from src.hr_portal.hr_portal.gateway.connection import GatewayConfig
from src.hr_portal.hr_portal.gateway.realtime import RealtimeChannel, open_realtime_channel


class FakeSocketApp:
    def __init__(self):
        self.sent = []
        self.closed = False

    def send(self, data):
        self.sent.append(json.loads(data))

    def close(self):
        self.closed = True


@pytest.fixture()
def rows():
    return []


@pytest.fixture()
def channel(rows):
    ch = RealtimeChannel(GatewayConfig(url="http://localhost:54321", api_key="anon"), ChannelKey("notifications"), rows.append)
    ch._app = FakeSocketApp()
    yield ch
    ch._stop.set()


def _frame(**kw):
    return json.dumps(kw)


def test_open_sends_postgres_changes_join(channel):
    channel._on_open(None)

    join = channel._app.sent[0]
    assert join["topic"] == "realtime:notifications"
    assert join["event"] == "phx_join"
    assert "join_ref" not in join
    assert join["payload"]["config"]["postgres_changes"] == [
        {"event": "INSERT", "schema": "public", "table": "notifications"}
    ]


def test_join_reply_marks_channel_joined(channel):
    channel._on_open(None)
    ref = channel._app.sent[0]["ref"]

    channel._on_message(None, _frame(topic="realtime:notifications", event="phx_reply", ref=ref, payload={"status": "ok"}))

    assert channel.joined.is_set()


def test_rejected_join_is_recorded(channel):
    channel._on_open(None)
    ref = channel._app.sent[0]["ref"]

    channel._on_message(
        None,
        _frame(topic="realtime:notifications", event="phx_reply", ref=ref, payload={"status": "error", "response": {"reason": "denied"}}),
    )

    assert not channel.joined.is_set()
    assert "denied" in channel.last_error


def test_insert_frames_deliver_the_record(channel, rows):
    record = {"id": "n1", "title": "Hello"}
    channel._on_message(
        None,
        _frame(topic="realtime:notifications", event="postgres_changes", payload={"data": {"type": "INSERT", "record": record}}),
    )
    channel._on_message(
        None,
        _frame(topic="realtime:notifications", event="postgres_changes", payload={"data": {"type": "DELETE", "old_record": record}}),
    )
    channel._on_message(None, _frame(topic="realtime:tasks", event="postgres_changes", payload={"data": {"type": "INSERT", "record": {}}}))
    channel._on_message(None, "not json")

    assert rows == [record]


def test_close_leaves_then_closes_socket(channel):
    channel._on_open(None)

    channel.close()

    assert channel._app.sent[-1]["event"] == "phx_leave"
    assert channel._app.closed


def test_open_fails_when_the_socket_is_refused(monkeypatch):
    def refused(self):
        self._app = FakeSocketApp()
        self._on_error(None, ConnectionRefusedError("[Errno 111] Connection refused"))
        self._on_close(None, None, None)

    monkeypatch.setattr(RealtimeChannel, "start", refused)
    lost = []
    open_channel = open_realtime_channel(GatewayConfig(url="http://127.0.0.1:1", api_key="anon"))

    with pytest.raises(SubscriptionError, match="Connection refused"):
        open_channel(ChannelKey("notifications"), lambda row: None, lambda: lost.append(1))
    assert lost == []


def test_open_fails_when_join_is_never_answered(monkeypatch):
    def silent(self):
        self._app = FakeSocketApp()
        self._on_open(None)

    monkeypatch.setattr(RealtimeChannel, "start", silent)
    monkeypatch.setattr(realtime_module, "JOIN_TIMEOUT_SECONDS", 0.01)
    open_channel = open_realtime_channel(GatewayConfig(url="http://localhost:54321", api_key="anon"))

    with pytest.raises(SubscriptionError, match="no join reply"):
        open_channel(ChannelKey("notifications"), lambda row: None, lambda: None)


def test_unexpected_close_after_join_reports_the_channel_lost(monkeypatch):
    channels = []

    def joined(self):
        self._app = FakeSocketApp()
        self._on_open(None)
        ref = self._app.sent[0]["ref"]
        self._on_message(None, _frame(topic=self.topic, event="phx_reply", ref=ref, payload={"status": "ok"}))
        channels.append(self)

    monkeypatch.setattr(RealtimeChannel, "start", joined)
    lost = []
    open_channel = open_realtime_channel(GatewayConfig(url="http://localhost:54321", api_key="anon"))

    dispose = open_channel(ChannelKey("notifications"), lambda row: None, lambda: lost.append("notifications"))
    channels[0]._on_close(None, 1006, "abnormal closure")

    assert lost == ["notifications"]
    dispose()


def test_deliberate_close_is_not_reported_as_lost(channel):
    lost = []
    channel._on_lost = lambda: lost.append(1)
    channel._on_open(None)
    ref = channel._app.sent[0]["ref"]
    channel._on_message(None, _frame(topic="realtime:notifications", event="phx_reply", ref=ref, payload={"status": "ok"}))

    channel.close()
    channel._on_close(None, 1000, "")

    assert lost == []


def test_feed_reopens_after_the_socket_drops(monkeypatch):
    channels = []

    def joined(self):
        self._app = FakeSocketApp()
        self._on_open(None)
        ref = self._app.sent[0]["ref"]
        self._on_message(None, _frame(topic=self.topic, event="phx_reply", ref=ref, payload={"status": "ok"}))
        channels.append(self)

    monkeypatch.setattr(RealtimeChannel, "start", joined)
    feed = ChangeFeed(open_realtime_channel(GatewayConfig(url="http://localhost:54321", api_key="anon")))
    key = ChannelKey("notifications")

    feed.subscribe(key, lambda row: None)
    channels[0]._on_close(None, 1006, "abnormal closure")
    feed.subscribe(key, lambda row: None)

    assert len(channels) == 2
    feed.close()
