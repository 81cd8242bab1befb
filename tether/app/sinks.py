# tether/app/sinks.py
from __future__ import annotations

import logging
import queue
from dataclasses import dataclass
from typing import Callable, List, Optional

from tether.interfaces.event_sink import EventSink
from tether.protocol.events import TetherEvent


@dataclass(frozen=True)
class AddressedEvent:
    address: str
    event: TetherEvent


class QueueEventSink(EventSink):
    """
    Bounded queue the host can poll from its own thread.

    When the host falls behind the newest events are dropped (and counted)
    rather than blocking the session's delivery thread.
    """

    def __init__(self, maxsize: int = 1024):
        self._queue: "queue.Queue[AddressedEvent]" = queue.Queue(maxsize=maxsize)
        self._log = logging.getLogger(__name__)
        self.dropped = 0

    def on_event(self, address: str, event: TetherEvent) -> None:
        try:
            self._queue.put_nowait(AddressedEvent(address, event))
        except queue.Full:
            self.dropped += 1
            self._log.warning("QUEUE_SINK_FULL address=%s dropped_kind=%s", address, event.kind)

    def get(self, timeout: Optional[float] = 0.1) -> Optional[AddressedEvent]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[AddressedEvent]:
        out: List[AddressedEvent] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except queue.Empty:
                return out

    def close(self) -> None:
        return None


class CallbackEventSink(EventSink):
    """Adapts a plain callable to the EventSink protocol."""

    def __init__(self, callback: Callable[[str, TetherEvent], None]):
        self._callback = callback

    def on_event(self, address: str, event: TetherEvent) -> None:
        self._callback(address, event)

    def close(self) -> None:
        return None
