# tether/core/context.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml

from tether.model.loader import MetadataLoader
from tether.model.transport import TransportType

from tether.transport.registry import TransportDriverRegistry
from tether.transport.factory import TransportFactory

from tether.core.errors import TransportConfigError


@dataclass(frozen=True)
class Context:
    transports: Dict[int, TransportType]
    transport_factory: TransportFactory

    @classmethod
    def load(
        cls,
        metadata_dir: str | Path | None = None,
        *,
        drivers: Optional[TransportDriverRegistry] = None,
    ) -> "Context":
        """
        Load the transport catalog and construct a transport factory.

        `metadata_dir` defaults to the catalog bundled with the package.
        `drivers` is injectable to support testing and custom driver registries.
        """
        ml = MetadataLoader(metadata_dir)
        try:
            ml.load_all()
        except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
            raise TransportConfigError(
                "Failed to load transport metadata.",
                hint=str(e),
                details={"metadata_dir": str(ml.config_dir)},
            ) from None

        drivers = drivers or TransportDriverRegistry.default()
        unknown = sorted({t.driver for t in ml.transports.values() if not drivers.has(t.driver)})
        if unknown:
            raise TransportConfigError(
                f"Transport metadata references unregistered driver '{unknown[0]}'.",
                hint=f"Registered drivers: {', '.join(drivers.drivers())}",
                details={"metadata_dir": str(ml.config_dir), "drivers": unknown},
            )

        return cls(
            transports=dict(ml.transports),
            transport_factory=TransportFactory(ml.transports, drivers),
        )
