# tether/runtime/outbound.py
from __future__ import annotations

import threading
from typing import Optional


class OutboundSlot:
    """
    Single-capacity holder for the next command to transmit.

    Last write wins: set() replaces any command the supervisor has not taken
    yet. Safe for one host-side writer and one worker-side reader.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._command: Optional[str] = None

    def set(self, command: str) -> None:
        with self._lock:
            # "" means nothing to send
            self._command = command or None

    def take(self) -> Optional[str]:
        """Return and clear the pending command (None if empty)."""
        with self._lock:
            command, self._command = self._command, None
        return command

    def clear(self) -> None:
        with self._lock:
            self._command = None

    @property
    def pending(self) -> Optional[str]:
        with self._lock:
            return self._command
