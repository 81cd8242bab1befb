# tether/runtime/event_pump.py
from __future__ import annotations

import logging
import threading
from queue import Empty, Full, Queue
from typing import Callable, List, Optional

from tether.interfaces.event_sink import EventSink
from tether.protocol.events import TetherEvent


class EventPump:
    """
    Threaded, ordered hand-off of events from a supervisor to event sinks.

    emit() never blocks: when the bounded queue is full the event is dropped
    and logged, so a slow sink cannot stall frame parsing or timeout checks.
    """

    def __init__(
        self,
        address: str,
        *,
        maxsize: int = 256,
        logger: Optional[logging.Logger] = None,
    ):
        self._address = address
        self._log = logger or logging.getLogger(__name__)

        self._queue: "Queue[TetherEvent]" = Queue(maxsize=maxsize)
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._sinks: List[EventSink] = []
        self.dropped = 0

        self._thread = threading.Thread(
            target=self._worker,
            name=f"tether-events-{address}",
            daemon=True,
        )
        self._thread.start()

    # ---------------- Public API ----------------
    def subscribe(self, sink: EventSink) -> Callable[[], None]:
        with self._lock:
            if sink not in self._sinks:
                self._sinks.append(sink)

        def _unsubscribe() -> None:
            with self._lock:
                if sink in self._sinks:
                    self._sinks.remove(sink)

        return _unsubscribe

    def emit(self, event: TetherEvent) -> bool:
        """Queue an event for delivery (no-op after close())."""
        if self._stop_event.is_set():
            return False
        try:
            self._queue.put_nowait(event)
        except Full:
            self.dropped += 1
            self._log.warning(
                "EVENT_QUEUE_FULL address=%s dropped_kind=%s dropped_total=%d",
                self._address,
                event.kind,
                self.dropped,
            )
            return False
        return True

    def close(self, timeout: Optional[float] = None) -> None:
        """Deliver what is queued, then stop the delivery thread."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    # ---------------- Internal ----------------
    def _worker(self) -> None:
        while not self._stop_event.is_set() or not self._queue.empty():
            try:
                event = self._queue.get(timeout=0.1)
            except Empty:
                continue
            self._deliver(event)

    def _deliver(self, event: TetherEvent) -> None:
        with self._lock:
            sinks = list(self._sinks)

        for sink in sinks:
            try:
                sink.on_event(self._address, event)
            except Exception:
                # never kill the delivery thread
                self._log.exception("EVENT_SINK_ERROR address=%s kind=%s", self._address, event.kind)
