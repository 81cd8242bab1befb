# tether/core/errors.py
from __future__ import annotations


class TetherError(Exception):
    """
    Base class for all expected operational errors in tether.
    """

    #: Stable machine-readable identifier (for CLI exit mapping, host APIs, etc.)
    code: str = "unknown"

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration / setup errors (no device access yet)
# ---------------------------------------------------------------------------

class TransportConfigError(TetherError):
    """
    Transport configuration is invalid or inconsistent with metadata.

    Examples:
      - unknown transport type id or label
      - unknown driver key
      - invalid / missing transport parameters
      - transports.yml missing or malformed
    """
    code = "transport_config_error"


# ---------------------------------------------------------------------------
# Link lifecycle errors
# ---------------------------------------------------------------------------

class DeviceConnectError(TetherError):
    """
    The device never reached the connected state when one was required.

    Examples:
      - Bluetooth peer out of range or not paired
      - serial port busy
      - connect wait expired in the CLI
    """
    code = "device_connect_error"


# ---------------------------------------------------------------------------
# Session registry errors
# ---------------------------------------------------------------------------

class SessionError(TetherError):
    """
    A session operation referenced an address the manager does not know.
    """
    code = "session_error"
