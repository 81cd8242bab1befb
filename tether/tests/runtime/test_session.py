from __future__ import annotations

import logging
import threading
import time

import pytest

from tether.app.sinks import QueueEventSink
from tether.protocol.events import ButtonEvent, Connected, Disconnected, PositionUpdate
from tether.runtime.session import TetherSession
from tether.runtime.state import LinkState, Position
from tether.transport.base import Transport
from tether.transport.errors import TransportOpenError


class LoopbackTransport(Transport):
    """Always connects; hands out queued inbound text and records writes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._open = False
        self.inbound = []
        self.writes = []
        self.connects = 0
        self.closes = 0

    def open(self):
        with self._lock:
            self._open = True
            self.connects += 1

    def close(self):
        with self._lock:
            self._open = False
            self.closes += 1

    def streaming(self):
        return self._open

    def feed(self, text):
        with self._lock:
            self.inbound.append(text)

    def read(self):
        with self._lock:
            return self.inbound.pop(0) if self.inbound else ""

    def write(self, text):
        with self._lock:
            self.writes.append(text)
        return len(text)


class UnreachableTransport(LoopbackTransport):
    """Refuses to open until reachable is set."""

    def __init__(self):
        super().__init__()
        self.reachable = False

    def open(self):
        if not self.reachable:
            raise TransportOpenError("peer out of range")
        super().open()


def _wait_for(predicate, timeout=1.0):
    deadline = time.time() + timeout
    while not predicate() and time.time() < deadline:
        time.sleep(0.005)
    return predicate()


def _collect(sink, n, timeout=1.0):
    out = []
    deadline = time.time() + timeout
    while len(out) < n and time.time() < deadline:
        item = sink.get(timeout=0.02)
        if item is not None:
            out.append(item.event)
    return out


@pytest.fixture
def transport():
    return LoopbackTransport()


@pytest.fixture
def session(transport):
    s = TetherSession(
        "dev0",
        transport,
        idle_wait_s=0.001,
        connect_retry_s=0.01,
        join_timeout_s=1.0,
        logger=logging.getLogger("test"),
    )
    yield s
    s.close()


def test_new_session_is_stopped(session):
    assert repr(session) == "<TetherSession: dev0>"
    assert session.is_running is False
    assert session.is_connected is False
    st = session.status()
    assert st.state == LinkState.STOPPED
    assert st.connected is False
    assert st.last_activity_s is None


def test_start_connects_and_stop_disconnects(session, transport):
    sink = QueueEventSink()
    session.subscribe(sink)

    session.start()
    assert _wait_for(lambda: session.is_connected)
    assert session.status().state == LinkState.CONNECTED

    session.stop()
    assert session.is_running is False
    assert session.is_connected is False
    assert transport.closes == 1

    assert _collect(sink, 2) == [Connected(), Disconnected()]


def test_start_and_stop_are_idempotent(session, transport):
    session.stop()
    session.stop()

    session.start()
    session.start()
    assert _wait_for(lambda: session.is_connected)
    assert transport.connects == 1

    session.stop()
    session.stop()
    assert transport.closes == 1


def test_send_command_rejected_while_stopped(session, transport):
    assert session.send_command("LED ON") is False
    assert session.status().pending_command is None


def test_send_command_is_transmitted(session, transport):
    session.start()
    assert _wait_for(lambda: session.is_connected)

    assert session.send_command("LED ON") is True
    assert _wait_for(lambda: transport.writes == ["LED ON\n"])


def test_events_arrive_in_order_and_position_is_tracked(session, transport):
    sink = QueueEventSink()
    session.subscribe(sink)
    session.start()
    assert _wait_for(lambda: session.is_connected)

    transport.feed("POS 150 -20 0\nBTN_1 1\n")
    assert _wait_for(lambda: session.position is not None)
    assert session.position == Position(x=1.5, y=-0.2, z=0.0)

    session.stop()
    assert _collect(sink, 4) == [
        Connected(),
        PositionUpdate(x=1.5, y=-0.2, z=0.0),
        ButtonEvent(id=1, pressed=True),
        Disconnected(),
    ]
    assert session.status().position == Position(x=1.5, y=-0.2, z=0.0)


def test_restart_spawns_new_worker(session, transport):
    session.start()
    assert _wait_for(lambda: session.is_connected)
    session.stop()

    session.start()
    assert _wait_for(lambda: session.is_connected)
    assert transport.connects == 2
    session.stop()
    assert transport.closes == 2


def test_unsubscribe_stops_delivery(session, transport):
    sink = QueueEventSink()
    unsubscribe = session.subscribe(sink)
    unsubscribe()

    session.start()
    assert _wait_for(lambda: session.is_connected)
    session.stop()

    assert sink.get(timeout=0.05) is None


def test_start_after_close_raises(transport):
    s = TetherSession("dev1", transport, logger=logging.getLogger("test"))
    s.close()
    with pytest.raises(RuntimeError):
        s.start()


def test_context_manager_starts_and_closes(transport):
    with TetherSession("dev2", transport, idle_wait_s=0.001, logger=logging.getLogger("test")) as s:
        assert s.is_running
        assert _wait_for(lambda: s.is_connected)
    assert s.is_running is False
    assert transport.closes == 1


def test_stop_discards_command_never_sent():
    transport = UnreachableTransport()
    s = TetherSession(
        "dev3",
        transport,
        idle_wait_s=0.001,
        connect_retry_s=0.01,
        join_timeout_s=1.0,
        logger=logging.getLogger("test"),
    )
    try:
        s.start()
        assert s.send_command("LED ON") is True
        assert s.status().pending_command == "LED ON"

        s.stop()
        assert s.status().pending_command is None

        transport.reachable = True
        s.start()
        assert _wait_for(lambda: s.is_connected)
        time.sleep(0.05)
        assert transport.writes == []
    finally:
        s.close()


def test_restart_sends_only_commands_issued_after_start(session, transport):
    session.start()
    assert _wait_for(lambda: session.is_connected)
    session.stop()

    session.start()
    assert session.send_command("LED OFF") is True
    assert _wait_for(lambda: transport.writes == ["LED OFF\n"])
