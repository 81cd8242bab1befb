# tether/transport/rfcomm.py
from __future__ import annotations

import socket
from typing import Optional

from .base import Transport
from .errors import TransportIOError, TransportOpenError


class RFCOMMTransport(Transport):
    """
    Bluetooth RFCOMM transport over a native stream socket (Linux/BlueZ, Windows).

    Notes:
      - connect_timeout_s bounds open(), so a stop request is never held up
        by an unreachable peer for longer than that.
      - read() waits at most read_timeout_s; a zero-length receive means the
        peer closed the link and streaming() turns False.
    """

    def __init__(
        self,
        address: str,
        channel: int = 1,
        connect_timeout_s: float = 5.0,
        read_timeout_s: float = 0.05,
        max_read: int = 1024,
    ):
        self.address = address
        self.channel = channel
        self.connect_timeout_s = connect_timeout_s
        self.read_timeout_s = read_timeout_s
        self.max_read = max_read
        self.sock: Optional[socket.socket] = None

    def __repr__(self) -> str:
        return f"RFCOMMTransport(address={self.address!r}, channel={self.channel})"

    def open(self) -> None:
        family = getattr(socket, "AF_BLUETOOTH", None)
        proto = getattr(socket, "BTPROTO_RFCOMM", None)
        if family is None or proto is None:
            raise TransportOpenError("Bluetooth RFCOMM sockets are not supported on this platform")

        sock = None
        try:
            sock = socket.socket(family, socket.SOCK_STREAM, proto)
            sock.settimeout(self.connect_timeout_s)
            sock.connect((self.address, int(self.channel)))
            sock.settimeout(self.read_timeout_s)
        except OSError as e:
            if sock is not None:
                sock.close()
            self.sock = None
            raise TransportOpenError(
                f"could not connect RFCOMM {self.address!r} channel {self.channel}: {e}"
            ) from None
        self.sock = sock

    def close(self) -> None:
        if self.sock is not None:
            try:
                self.sock.close()
            finally:
                self.sock = None

    def streaming(self) -> bool:
        return self.sock is not None

    def read(self) -> str:
        if self.sock is None:
            raise TransportIOError("read while transport not open")

        try:
            data = self.sock.recv(self.max_read)
        except socket.timeout:
            return ""
        except OSError as e:
            self.close()
            raise TransportIOError(f"RFCOMM read failed: {e}") from None

        if not data:
            # orderly shutdown from the peer
            self.close()
            return ""
        return self._decode(data)

    def write(self, text: str) -> int:
        if self.sock is None:
            raise TransportIOError("write while transport not open")

        data = self._encode(text)
        try:
            self.sock.sendall(data)
        except OSError as e:
            self.close()
            raise TransportIOError(f"RFCOMM write failed: {e}") from None
        return len(data)
