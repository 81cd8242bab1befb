# tether/runtime/state.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LinkState(str, Enum):
    """
    Supervisor state machine.

    STOPPED -> CONNECTING -> CONNECTED -> (CONNECTING on loss) -> STOPPED on stop.
    """
    STOPPED = "stopped"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(frozen=True)
class Position:
    """
    Last known device position, in centimetres.
    """
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class SessionStatus:
    """
    A snapshot of one session, safe to share across threads.
    """
    address: str
    running: bool
    state: LinkState
    connected: bool
    last_activity_s: Optional[float] = None
    position: Optional[Position] = None
    pending_command: Optional[str] = None
