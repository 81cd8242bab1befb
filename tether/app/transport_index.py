# tether/app/transport_index.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from tether.core.context import Context
from tether.core.errors import TransportConfigError
from tether.model.transport import TransportType


@dataclass(frozen=True, slots=True)
class TransportIndex:
    """
    App-facing transport index (metadata-driven, read-only view).

    Notes:
      - Use `from_context()` when a Context is already loaded.
      - `load()` is a convenience for cli/tests.
    """
    _transports: Mapping[int, TransportType]

    @classmethod
    def from_context(cls, context: Context) -> "TransportIndex":
        return cls(_transports=context.transport_factory.transports())

    @classmethod
    def load(cls, *, metadata_dir: Optional[str] = None) -> "TransportIndex":
        return cls.from_context(Context.load(metadata_dir))

    def catalog(self) -> Mapping[int, TransportType]:
        """Return the raw type_id -> TransportType mapping."""
        return self._transports

    def list(self) -> list[TransportType]:
        """Return transports ordered by type_id."""
        return [self._transports[k] for k in sorted(self._transports.keys())]

    def meta_for_type_id(self, type_id: int) -> TransportType:
        meta = self._transports.get(int(type_id))
        if meta is None:
            raise TransportConfigError(
                f"Unknown transport type id '{type_id}'.",
                hint="Run: tether transports",
            )
        return meta

    def resolve_type_id_by_label(self, label: str) -> int:
        want = label.strip().lower()

        for tid, meta in self._transports.items():
            if meta.label.strip().lower() == want:
                return int(tid)

        known = ", ".join(sorted(m.label for m in self._transports.values()))
        raise TransportConfigError(
            f"Unknown transport '{label}'.",
            hint=f"Run: tether transports (known: {known})",
        )

    def schema_for_type_id(self, type_id: int) -> Mapping[str, Mapping[str, Any]]:
        return self.meta_for_type_id(type_id).params
