# tether/protocol/events.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict


@dataclass(frozen=True)
class TetherEvent:
    """
    Base of the application-visible notifications produced by a session.

    Events are immutable and safe to hand across threads.
    """
    kind: ClassVar[str] = "event"

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind}
        out.update(asdict(self))
        return out


@dataclass(frozen=True)
class Connected(TetherEvent):
    kind: ClassVar[str] = "connected"


@dataclass(frozen=True)
class Disconnected(TetherEvent):
    kind: ClassVar[str] = "disconnected"


@dataclass(frozen=True)
class PositionUpdate(TetherEvent):
    """Device position in centimetres."""
    kind: ClassVar[str] = "position"
    unit: ClassVar[str] = "cm"

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class ButtonEvent(TetherEvent):
    kind: ClassVar[str] = "button"

    id: int
    pressed: bool


@dataclass(frozen=True)
class Acknowledgement(TetherEvent):
    """Device accepted a command; `text` is the full AOK frame."""
    kind: ClassVar[str] = "ack"

    text: str


@dataclass(frozen=True)
class DeviceError(TetherEvent):
    """Device reported an error; `text` is the full ERROR frame."""
    kind: ClassVar[str] = "error"

    text: str
