# tether/protocol/dispatcher.py
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from .defs import (
    BUTTON_COMMANDS,
    CMD_ACK,
    CMD_ERROR,
    CMD_POSITION,
    POSITION_DIVISOR,
    TOKEN_DELIMITER,
)
from .errors import MalformedFrameError, ProtocolError, UnknownCommandError
from .events import (
    Acknowledgement,
    ButtonEvent,
    DeviceError,
    PositionUpdate,
    TetherEvent,
)

# (frame, args) -> event
Handler = Callable[[str, List[str]], TetherEvent]

_INT_TOKEN = re.compile(r"-?[0-9]+")


class CommandDispatcher:
    """
    Maps one inbound frame to a typed event.

    Each command name has a fixed argument count (None = any). Frames with an
    unknown name, the wrong arity or unparsable numbers are rejected by
    parse() and silently dropped (with a warning) by dispatch().
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._commands: Dict[str, Tuple[Optional[int], Handler]] = {
            CMD_POSITION: (3, self._position),
            CMD_ACK: (None, self._ack),
            CMD_ERROR: (None, self._error),
        }
        for name, button_id in BUTTON_COMMANDS.items():
            self._commands[name] = (1, self._button_handler(button_id))

    @property
    def command_names(self) -> List[str]:
        return sorted(self._commands)

    # ---------------- Public API ----------------
    def parse(self, frame: str) -> TetherEvent:
        """Convert a frame to an event; raises ProtocolError on rejection."""
        tokens = self.tokenize(frame)
        if not tokens:
            raise MalformedFrameError(frame, "empty frame")

        name, args = tokens[0], tokens[1:]
        entry = self._commands.get(name)
        if entry is None:
            raise UnknownCommandError(frame, name)

        arity, handler = entry
        if arity is not None and len(args) != arity:
            raise MalformedFrameError(frame, f"{name} expects {arity} args, got {len(args)}")

        return handler(frame.rstrip("\r"), args)

    def dispatch(self, frame: str) -> Optional[TetherEvent]:
        """Like parse(), but drops rejected frames and returns None."""
        if not frame.rstrip("\r"):
            self._log.debug("EMPTY_FRAME dropped")
            return None

        try:
            event = self.parse(frame)
        except ProtocolError as e:
            self._log.warning("FRAME_DROPPED reason=%s frame=%r", e.reason, e.frame)
            return None

        self._log.debug("FRAME_DISPATCHED frame=%r event=%s", frame, event.kind)
        return event

    @staticmethod
    def tokenize(frame: str) -> List[str]:
        tokens = frame.rstrip("\r").split(TOKEN_DELIMITER)
        # trailing delimiters do not count as arguments
        while tokens and tokens[-1] == "":
            tokens.pop()
        return tokens

    # ---------------- Handlers ----------------
    @staticmethod
    def _int_arg(frame: str, value: str) -> int:
        if not _INT_TOKEN.fullmatch(value):
            raise MalformedFrameError(frame, f"non-numeric argument {value!r}")
        return int(value)

    def _position(self, frame: str, args: List[str]) -> TetherEvent:
        x, y, z = (self._int_arg(frame, a) / POSITION_DIVISOR for a in args)
        return PositionUpdate(x=x, y=y, z=z)

    def _button_handler(self, button_id: int) -> Handler:
        def _button(frame: str, args: List[str]) -> TetherEvent:
            state = self._int_arg(frame, args[0])
            return ButtonEvent(id=button_id, pressed=state > 0)

        return _button

    @staticmethod
    def _ack(frame: str, args: List[str]) -> TetherEvent:
        return Acknowledgement(text=frame)

    @staticmethod
    def _error(frame: str, args: List[str]) -> TetherEvent:
        return DeviceError(text=frame)
