# protocol/__init__.py

from .decoder import FrameDecoder
from .dispatcher import CommandDispatcher
from .errors import ProtocolError, MalformedFrameError, UnknownCommandError
from .events import (
    TetherEvent,
    Connected, Disconnected,
    PositionUpdate, ButtonEvent,
    Acknowledgement, DeviceError,
)

__all__ = [
    "FrameDecoder", "CommandDispatcher",
    "ProtocolError", "MalformedFrameError", "UnknownCommandError",
    "TetherEvent", "Connected", "Disconnected",
    "PositionUpdate", "ButtonEvent", "Acknowledgement", "DeviceError",
]
