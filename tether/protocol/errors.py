# tether/protocol/errors.py

class ProtocolError(Exception):
    """Base for protocol-level failures (framing/parse/command semantics)."""

    def __init__(self, frame: str, reason: str):
        super().__init__(f"{reason}: {frame!r}")
        self.frame = frame
        self.reason = reason

class UnknownCommandError(ProtocolError):
    def __init__(self, frame: str, name: str):
        super().__init__(frame, f"unknown command '{name}'")
        self.name = name

class MalformedFrameError(ProtocolError):
    pass
