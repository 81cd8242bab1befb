# tether/transport/registry.py
from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Type

from .base import Transport
from .errors import TransportError
from .rfcomm import RFCOMMTransport
from .uart import UARTTransport

BUILTIN_DRIVERS: Mapping[str, Type[Transport]] = {
    "rfcomm": RFCOMMTransport,
    "uart": UARTTransport,
}


class TransportDriverRegistry:
    """
    Driver key -> Transport class. Keys are case-insensitive.

    Knows nothing about the YAML catalog; the factory pairs the two.
    """

    def __init__(self, drivers: Optional[Mapping[str, Type[Transport]]] = None):
        self._drivers: Dict[str, Type[Transport]] = {}
        for key, transport_cls in (drivers or {}).items():
            self.register(key, transport_cls)

    @classmethod
    def default(cls) -> "TransportDriverRegistry":
        return cls(BUILTIN_DRIVERS)

    def register(self, driver: str, transport_cls: Type[Transport]) -> None:
        self._drivers[driver.lower()] = transport_cls

    def drivers(self) -> List[str]:
        return sorted(self._drivers)

    def has(self, driver: str) -> bool:
        return driver.lower() in self._drivers

    def get_class(self, driver: str) -> Type[Transport]:
        try:
            return self._drivers[driver.lower()]
        except KeyError:
            raise TransportError(
                f"Transport driver '{driver}' not registered (known: {', '.join(self.drivers()) or 'none'})"
            ) from None

    def create(self, driver: str, **params) -> Transport:
        """Instantiate (but do not open) a transport."""
        return self.get_class(driver)(**params)
