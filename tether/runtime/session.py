# tether/runtime/session.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from tether.interfaces.event_sink import EventSink
from tether.protocol.decoder import FrameDecoder
from tether.protocol.defs import LINK_TIMEOUT_S
from tether.protocol.events import PositionUpdate, TetherEvent
from tether.runtime.event_pump import EventPump
from tether.runtime.outbound import OutboundSlot
from tether.runtime.state import LinkState, Position, SessionStatus
from tether.runtime.supervisor import ConnectionSupervisor
from tether.transport.base import Transport


class TetherSession:
    """
    Logical session with one peer address.

    start()/stop() toggle the desired run state; each start() spawns a fresh
    ConnectionSupervisor for the same address and transport. Events reach
    subscribers through a per-session EventPump, in emission order.
    close() is final: it stops the worker and shuts the event delivery down.
    """

    def __init__(
        self,
        address: str,
        transport: Transport,
        *,
        timeout_s: float = LINK_TIMEOUT_S,
        idle_wait_s: float = 0.005,
        connect_retry_s: float = 0.5,
        join_timeout_s: float = 5.0,
        event_queue_size: int = 256,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._address = str(address)
        self._transport = transport
        self._log = logger or logging.getLogger(__name__)

        self._timeout_s = float(timeout_s)
        self._idle_wait_s = float(idle_wait_s)
        self._connect_retry_s = float(connect_retry_s)
        self._join_timeout_s = float(join_timeout_s)
        self._clock = clock

        self._lock = threading.RLock()
        self._on = threading.Event()
        self._outbound = OutboundSlot()
        self._decoder = FrameDecoder(logger=self._log)
        self._pump = EventPump(self._address, maxsize=event_queue_size, logger=self._log)
        self._worker: Optional[ConnectionSupervisor] = None
        self._position: Optional[Position] = None
        self._closed = False

    def __repr__(self) -> str:
        return f"<TetherSession: {self._address}>"

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_running(self) -> bool:
        return self._on.is_set()

    @property
    def is_connected(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_alive() and worker.connected

    @property
    def position(self) -> Optional[Position]:
        return self._position

    # ---------------- Lifecycle ----------------
    def start(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self!r} is closed")
            if self._on.is_set():
                return

            stale = self._worker
            if stale is not None and stale.is_alive():
                # previous worker still finishing a blocking connect
                self._log.info("SESSION_WAIT_PREVIOUS_WORKER address=%s", self._address)
                stale.join()

            self._log.info("SESSION_START address=%s transport=%r", self._address, self._transport)
            self._on.set()
            self._worker = ConnectionSupervisor(
                self._address,
                self._transport,
                outbound=self._outbound,
                emit=self._on_event,
                decoder=self._decoder,
                timeout_s=self._timeout_s,
                idle_wait_s=self._idle_wait_s,
                connect_retry_s=self._connect_retry_s,
                clock=self._clock,
                logger=self._log,
            )
            self._worker.start()

    def stop(self) -> None:
        with self._lock:
            if not self._on.is_set():
                return

            self._log.info("SESSION_STOP address=%s", self._address)
            self._on.clear()
            worker = self._worker
            if worker is not None:
                worker.request_stop()
                worker.join(timeout=self._join_timeout_s)
                if worker.is_alive():
                    self._log.warning(
                        "SESSION_STOP_PENDING address=%s worker busy after %.1fs (blocking connect)",
                        self._address,
                        self._join_timeout_s,
                    )
            # a command never taken does not outlive its run
            self._outbound.clear()

    def close(self) -> None:
        """Stop the session and deliver any queued events."""
        self.stop()
        self._closed = True
        self._pump.close(timeout=self._join_timeout_s)

    def __enter__(self) -> "TetherSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- Host API ----------------
    def send_command(self, text: str) -> bool:
        """
        Replace the pending outbound command. Accepted only while running;
        stop() discards a command the link never took.
        """
        if not self._on.is_set():
            self._log.debug("COMMAND_REJECTED address=%s not running", self._address)
            return False
        self._outbound.set(text)
        return True

    def subscribe(self, sink: EventSink) -> Callable[[], None]:
        return self._pump.subscribe(sink)

    def status(self) -> SessionStatus:
        worker = self._worker
        alive = worker is not None and worker.is_alive()
        connected = alive and worker.connected
        last_activity_s = (self._clock() - worker.last_activity) if connected else None

        return SessionStatus(
            address=self._address,
            running=self._on.is_set(),
            state=worker.state if alive else LinkState.STOPPED,
            connected=connected,
            last_activity_s=last_activity_s,
            position=self._position,
            pending_command=self._outbound.pending,
        )

    # ---------------- Internal ----------------
    def _on_event(self, event: TetherEvent) -> None:
        # supervisor thread
        if isinstance(event, PositionUpdate):
            self._position = Position(x=event.x, y=event.y, z=event.z)
        self._pump.emit(event)
