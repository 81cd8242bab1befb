# tether/runtime/supervisor.py
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from tether.protocol.decoder import FrameDecoder
from tether.protocol.defs import FRAME_TERMINATOR, LINK_TIMEOUT_S
from tether.protocol.dispatcher import CommandDispatcher
from tether.protocol.events import Connected, Disconnected, TetherEvent
from tether.runtime.outbound import OutboundSlot
from tether.runtime.state import LinkState
from tether.transport.base import Transport
from tether.transport.errors import TransportError

# step() outcomes
STEP_EXIT = "exit"      # stop observed, worker must end
STEP_BUSY = "busy"      # something happened, loop again right away
STEP_IDLE = "idle"      # nothing to do, short idle wait
STEP_RETRY = "retry"    # connect failed, wait before the next attempt


class ConnectionSupervisor(threading.Thread):
    """
    Per-session worker owning the link: connect, write, read, timeout, close.

    One iteration (step) does, in order:
      1. stop requested -> disconnect sequence if connected, then exit
      2. not connected  -> reset a stale link and try to connect
      3. connected      -> declare the link lost on inactivity or streaming loss
      4. send the pending outbound command, if any
      5. read, feed the decoder and dispatch every complete frame

    The supervisor is the only writer of the connection flag, the receive
    buffer and the activity timestamp. The host talks to it through
    request_stop() and the OutboundSlot.
    """

    def __init__(
        self,
        address: str,
        transport: Transport,
        *,
        outbound: OutboundSlot,
        emit: Callable[[TetherEvent], None],
        decoder: Optional[FrameDecoder] = None,
        dispatcher: Optional[CommandDispatcher] = None,
        timeout_s: float = LINK_TIMEOUT_S,
        idle_wait_s: float = 0.005,
        connect_retry_s: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(name=f"tether-link-{address}", daemon=True)
        self.address = address
        self.transport = transport
        self.outbound = outbound
        self._log = logger or logging.getLogger(__name__)
        self._emit = emit
        self.decoder = decoder or FrameDecoder(logger=self._log)
        self.dispatcher = dispatcher or CommandDispatcher(logger=self._log)

        self.timeout_s = float(timeout_s)
        self.idle_wait_s = float(idle_wait_s)
        self.connect_retry_s = float(connect_retry_s)
        self._clock = clock

        self._stop_event = threading.Event()
        self._state = LinkState.STOPPED
        self._connected = False
        self._last_activity = clock()

    # ---------------- Host-facing ----------------
    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def last_activity(self) -> float:
        return self._last_activity

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Observed at the top of the next iteration."""
        self._stop_event.set()

    # ---------------- Worker loop ----------------
    def run(self) -> None:
        self._state = LinkState.CONNECTING
        self._log.info("SUPERVISOR_STARTED address=%s", self.address)
        while True:
            try:
                outcome = self.step()
            except Exception:
                self._log.exception("SUPERVISOR_STEP_EXCEPTION address=%s", self.address)
                self._stop_event.wait(0.01)
                continue

            if outcome == STEP_EXIT:
                break
            if outcome == STEP_RETRY:
                self._stop_event.wait(self.connect_retry_s)
            elif outcome == STEP_IDLE:
                self._stop_event.wait(self.idle_wait_s)
        self._log.info("SUPERVISOR_EXITED address=%s", self.address)

    def step(self) -> str:
        if self._stop_event.is_set():
            if self._connected:
                self._log.info("SESSION_STOPPED_BY_HOST address=%s closing link", self.address)
                self._disconnect()
            elif self.transport.streaming():
                # half-open link left behind by a lost connection
                self.transport.close()
            self._state = LinkState.STOPPED
            return STEP_EXIT

        if not self._connected:
            if not self._connect():
                return STEP_RETRY

        elapsed = self._clock() - self._last_activity
        streaming = self.transport.streaming()
        if elapsed > self.timeout_s or not streaming:
            self._log.warning(
                "LINK_LOST address=%s idle_ms=%d streaming=%s",
                self.address,
                int(elapsed * 1000),
                streaming,
            )
            self._connected = False
            self._state = LinkState.CONNECTING
            self._emit(Disconnected())
            return STEP_BUSY

        busy = False

        command = self.outbound.take()
        if command is not None:
            busy = True
            try:
                self.transport.write(command + FRAME_TERMINATOR)
                self._log.debug("COMMAND_SENT address=%s command=%r", self.address, command)
            except TransportError as e:
                # streaming() now reports False; next step declares the loss
                self._log.warning("COMMAND_SEND_FAILED address=%s command=%r err=%s", self.address, command, e)
                return STEP_BUSY

        try:
            received = self.transport.read()
        except TransportError as e:
            self._log.warning("LINK_READ_FAILED address=%s err=%s", self.address, e)
            return STEP_BUSY

        if received:
            busy = True
            self.decoder.push(received)
            self._last_activity = self._clock()
            for frame in self.decoder.frames():
                event = self.dispatcher.dispatch(frame)
                if event is not None:
                    self._emit(event)

        return STEP_BUSY if busy else STEP_IDLE

    # ---------------- Helpers ----------------
    def _connect(self) -> bool:
        self._state = LinkState.CONNECTING
        if self.transport.streaming():
            self.transport.close()

        self._log.debug("CONNECTING address=%s", self.address)
        if not self.transport.connect():
            self._log.warning("CONNECT_FAILED address=%s", self.address)
            return False

        self._connected = True
        self._state = LinkState.CONNECTED
        self.decoder.clear()
        self._last_activity = self._clock()
        self._log.info("CONNECTED address=%s", self.address)
        self._emit(Connected())
        return True

    def _disconnect(self) -> None:
        self._connected = False
        self.outbound.clear()
        self.decoder.clear()
        self._emit(Disconnected())
        try:
            self.transport.close()
        except TransportError:
            self._log.exception("TRANSPORT_CLOSE_FAILED address=%s", self.address)
