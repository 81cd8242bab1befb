"""
Host-side control channel for a tether position/button device.

Keeps one supervised session per device address over an unreliable link,
decodes the line protocol into typed events and sends single commands back.
"""

from tether.app.config import TetherConfig
from tether.app.manager import SessionManager
from tether.protocol.events import (
    Acknowledgement,
    ButtonEvent,
    Connected,
    DeviceError,
    Disconnected,
    PositionUpdate,
    TetherEvent,
)
from tether.runtime.session import TetherSession

__version__ = "0.1.0"

__all__ = [
    "TetherConfig",
    "SessionManager",
    "TetherSession",
    "TetherEvent",
    "Connected",
    "Disconnected",
    "PositionUpdate",
    "ButtonEvent",
    "Acknowledgement",
    "DeviceError",
]
