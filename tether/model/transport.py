# tether/model/transport.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True, repr=False)
class TransportType:
    """
    One entry of the transport catalog (transports.yml). Metadata only.

    `key_param` names the constructor argument that carries the peer
    address ("address" for RFCOMM, "port" for a serial device); the session
    address is always bound to it.
    """
    type_id: int
    label: str
    driver: str
    params: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    key_param: str = "address"

    @property
    def option_names(self) -> List[str]:
        """Params other than the key param, in catalog order."""
        return [name for name in self.params if name != self.key_param]

    def as_dict(self) -> dict:
        return asdict(self)

    def __repr__(self) -> str:
        return f"<TransportType {self.type_id}:{self.label} driver={self.driver} key={self.key_param}>"
