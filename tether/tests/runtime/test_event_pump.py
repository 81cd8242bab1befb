from __future__ import annotations

import logging
import threading
import time

from tether.protocol.events import Acknowledgement, ButtonEvent, Connected
from tether.runtime.event_pump import EventPump


class ListSink:
    def __init__(self):
        self.received = []

    def on_event(self, address, event):
        self.received.append((address, event))

    def close(self):
        pass


class BrokenSink:
    def on_event(self, address, event):
        raise RuntimeError("sink failure")

    def close(self):
        pass


class BlockingSink:
    def __init__(self):
        self.release = threading.Event()
        self.received = []

    def on_event(self, address, event):
        self.release.wait(timeout=2.0)
        self.received.append(event)

    def close(self):
        pass


def test_events_delivered_in_order():
    pump = EventPump("dev0", logger=logging.getLogger("test"))
    sink = ListSink()
    pump.subscribe(sink)

    events = [Connected()] + [ButtonEvent(id=1, pressed=i % 2 == 0) for i in range(20)]
    for e in events:
        assert pump.emit(e) is True

    pump.close(timeout=1.0)
    assert not pump.is_alive
    assert sink.received == [("dev0", e) for e in events]


def test_subscribe_twice_delivers_once():
    pump = EventPump("dev0")
    sink = ListSink()
    pump.subscribe(sink)
    pump.subscribe(sink)

    pump.emit(Connected())
    pump.close(timeout=1.0)

    assert len(sink.received) == 1


def test_failing_sink_does_not_block_others(caplog):
    pump = EventPump("dev0", logger=logging.getLogger("test"))
    good = ListSink()
    pump.subscribe(BrokenSink())
    pump.subscribe(good)

    with caplog.at_level(logging.ERROR, logger="test"):
        pump.emit(Acknowledgement(text="AOK"))
        pump.emit(Connected())
        pump.close(timeout=1.0)

    assert [e for _, e in good.received] == [Acknowledgement(text="AOK"), Connected()]
    assert "EVENT_SINK_ERROR" in caplog.text


def test_full_queue_drops_without_blocking():
    pump = EventPump("dev0", maxsize=2, logger=logging.getLogger("test"))
    sink = BlockingSink()
    pump.subscribe(sink)

    pump.emit(Connected())
    deadline = time.time() + 1.0
    while pump._queue.qsize() and time.time() < deadline:
        time.sleep(0.005)

    # delivery thread is parked inside the sink; two slots remain
    assert pump.emit(ButtonEvent(id=1, pressed=True)) is True
    assert pump.emit(ButtonEvent(id=2, pressed=True)) is True

    t0 = time.monotonic()
    assert pump.emit(ButtonEvent(id=1, pressed=False)) is False
    assert time.monotonic() - t0 < 0.5
    assert pump.dropped == 1

    sink.release.set()
    pump.close(timeout=1.0)
    assert sink.received == [
        Connected(),
        ButtonEvent(id=1, pressed=True),
        ButtonEvent(id=2, pressed=True),
    ]


def test_emit_after_close_is_ignored():
    pump = EventPump("dev0")
    pump.close(timeout=1.0)
    assert pump.emit(Connected()) is False
