# tether/transport/params.py
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from tether.model.transport import TransportType
from tether.core.errors import TransportConfigError


def _as_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"Expected str, got {type(value).__name__}")
    return value


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Expected int, got {type(value).__name__}")
    return value


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Expected float, got {type(value).__name__}")
    return float(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    # accept 0/1 int
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise TypeError(f"Expected bool (or 0/1), got {type(value).__name__}")


CASTS: Dict[str, Callable[[Any], Any]] = {
    "str": _as_str,
    "int": _as_int,
    "float": _as_float,
    "bool": _as_bool,
}


class TransportParamResolver:
    """
    Turn a catalog entry's param schema + caller values into constructor kwargs.

    The session address is just the value of the entry's key_param; callers
    pass it separately so it always wins over a stale override.
    """

    def __init__(self, transports: Mapping[int, TransportType]):
        self._transports = transports

    def meta(self, type_id: int) -> TransportType:
        meta = self._transports.get(int(type_id))
        if meta is None:
            raise TransportConfigError(
                f"No transport metadata id={type_id}.",
                hint="Check transport_type_id against transports.yml.",
                details={"type_id": int(type_id)},
            )
        return meta

    def resolve(
        self,
        type_id: int,
        overrides: Optional[Mapping[str, Any]] = None,
        *,
        address: Optional[str] = None,
    ) -> Dict[str, Any]:
        meta = self.meta(type_id)
        values = dict(overrides or {})
        if address is not None:
            values[meta.key_param] = address

        unknown = sorted(set(values) - set(meta.params))
        if unknown:
            raise TransportConfigError(
                f"Unknown transport param '{unknown[0]}' for transport '{meta.label}'.",
                hint=f"Valid params: {sorted(meta.params)}",
                details={"label": meta.label, "driver": meta.driver, "params": unknown},
            )

        resolved: Dict[str, Any] = {}
        for name, spec in meta.params.items():
            if name in values:
                value = values[name]
            elif "default" in spec:
                value = spec["default"]
            elif spec.get("required", False):
                raise TransportConfigError(
                    f"Missing required transport param '{name}' for transport '{meta.label}'.",
                    hint="Provide it as a CLI flag / config override.",
                    details={"label": meta.label, "driver": meta.driver, "param": name},
                )
            else:
                continue

            if value is None:
                resolved[name] = None
                continue

            cast = CASTS.get(str(spec.get("type")))
            try:
                if cast is None:
                    raise TypeError(f"Unknown schema type '{spec.get('type')}'")
                resolved[name] = cast(value)
            except TypeError as e:
                raise TransportConfigError(
                    f"Invalid value for transport '{meta.label}' param '{name}'.",
                    hint=str(e),
                    details={
                        "label": meta.label,
                        "param": name,
                        "value": value,
                        "expected_type": spec.get("type"),
                    },
                ) from None

        return resolved
