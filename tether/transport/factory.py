# tether/transport/factory.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from tether.model.transport import TransportType
from tether.transport.base import Transport
from tether.transport.registry import TransportDriverRegistry
from tether.transport.params import TransportParamResolver
from tether.transport.errors import TransportError
from tether.core.errors import TransportConfigError


@dataclass(frozen=True)
class DeviceTransport:
    transport: Transport
    params: Dict[str, Any]
    meta: TransportType

    @property
    def address(self) -> str:
        return str(self.params.get(self.meta.key_param, ""))


class TransportFactory:
    """
    Constructs a transport instance for one peer address from metadata + overrides.
    Note: does NOT open the transport.
    """

    def __init__(
        self,
        transports: Mapping[int, TransportType],
        drivers: TransportDriverRegistry,
    ):
        self._transports = transports
        self._drivers = drivers
        self._params = TransportParamResolver(transports)

    def transports(self) -> Mapping[int, TransportType]:
        return dict(self._transports)

    def create(
        self,
        type_id: int,
        address: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> DeviceTransport:
        meta = self._params.meta(type_id)
        params = self._params.resolve(type_id, overrides, address=address)

        try:
            transport = self._drivers.create(meta.driver, **params)
        except (TransportError, TypeError) as e:
            # unknown driver key or constructor mismatch
            raise TransportConfigError(
                f"Failed to construct transport '{meta.label}' (driver='{meta.driver}').",
                hint=str(e),
                details={
                    "type_id": int(type_id),
                    "driver": meta.driver,
                    "params": dict(params),
                },
            ) from None

        return DeviceTransport(transport=transport, params=params, meta=meta)
