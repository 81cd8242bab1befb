# tether/interfaces/event_sink.py
from __future__ import annotations

from typing import Protocol

from tether.protocol.events import TetherEvent


class EventSink(Protocol):
    """
    Receives a session's events in emission order.

    Called from the session's delivery thread, never from the supervisor.
    """
    def on_event(self, address: str, event: TetherEvent) -> None: ...
    def close(self) -> None: ...
