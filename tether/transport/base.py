from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from .errors import TransportOpenError

log = logging.getLogger(__name__)


class Transport(ABC):
    """
    Abstract text transport to one peer (Bluetooth RFCOMM, UART, ...).

    Contract:
      - open()/close() manage the underlying connection. open() raises
        TransportOpenError; close() is safe to call when already closed.
      - connect() wraps open() and reports success as a bool.
      - streaming() is a liveness probe: False once the link is gone.
      - read() returns promptly with whatever text is available, "" if none.
        It must not block indefinitely.
      - write(text) returns the number of bytes written.
      - I/O failures raise TransportIOError and leave streaming() False.
    """

    encoding = "ascii"

    @abstractmethod
    def open(self) -> None: ...

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def streaming(self) -> bool: ...

    @abstractmethod
    def read(self) -> str: ...

    @abstractmethod
    def write(self, text: str) -> int: ...

    def connect(self) -> bool:
        try:
            self.open()
        except TransportOpenError as e:
            log.debug("TRANSPORT_OPEN_FAILED transport=%r err=%s", self, e)
            return False
        return True

    def _encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors="replace")

    def _decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors="replace")

    def __enter__(self) -> "Transport":
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()
