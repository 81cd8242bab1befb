from .outbound import OutboundSlot
from .session import TetherSession
from .state import LinkState, Position, SessionStatus
from .supervisor import ConnectionSupervisor

__all__ = [
    "OutboundSlot",
    "TetherSession",
    "LinkState", "Position", "SessionStatus",
    "ConnectionSupervisor",
]
