# tether/app/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tether.protocol.defs import LINK_TIMEOUT_S


@dataclass(frozen=True)
class TetherConfig:
    transport_type_id: int
    transport_overrides: Dict[str, Any] = field(default_factory=dict)
    metadata_dir: Optional[str] = None       # None = bundled catalog
    timeout_s: float = LINK_TIMEOUT_S
    idle_wait_s: float = 0.005
    connect_retry_s: float = 0.5
    join_timeout_s: float = 5.0
    event_queue_size: int = 256
