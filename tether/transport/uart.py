# tether/transport/uart.py
from __future__ import annotations

from typing import Optional

import serial
from serial import SerialException

from .base import Transport
from .errors import TransportIOError, TransportOpenError


class UARTTransport(Transport):
    """
    Serial transport implemented via pyserial.

    Also covers Bluetooth SPP links that the OS exposes as a serial device
    (/dev/rfcomm0, COMx). read() returns what is buffered, waiting at most
    `timeout` seconds for the first byte.
    """

    def __init__(self, port: str, baudrate: int = 115200, timeout: float = 0.05, max_read: int = 1024):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.max_read = max_read
        self.ser: Optional[serial.Serial] = None

    def __repr__(self) -> str:
        return f"UARTTransport(port={self.port!r}, baudrate={self.baudrate})"

    def open(self) -> None:
        try:
            self.ser = serial.Serial(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
                write_timeout=self.timeout,
            )
            self.ser.reset_input_buffer()
            self.ser.reset_output_buffer()
        except SerialException as e:
            self.ser = None
            raise TransportOpenError(str(e)) from None

    def close(self) -> None:
        if self.ser is not None:
            try:
                self.ser.close()
            finally:
                self.ser = None

    def streaming(self) -> bool:
        return self.ser is not None and self.ser.is_open

    def read(self) -> str:
        if self.ser is None:
            raise TransportIOError("read while transport not open")

        try:
            waiting = self.ser.in_waiting
            # nothing buffered: block for at most `timeout` on a single byte
            data = self.ser.read(min(waiting, self.max_read) if waiting else 1)
        except (SerialException, OSError) as e:
            self.ser = None
            raise TransportIOError(f"UART read failed: {e}") from None
        return self._decode(data) if data else ""

    def write(self, text: str) -> int:
        if self.ser is None:
            raise TransportIOError("write while transport not open")

        try:
            n = self.ser.write(self._encode(text))
            self.ser.flush()
            return n
        except (SerialException, OSError) as e:
            self.ser = None
            raise TransportIOError(f"UART write failed: {e}") from None
