# tether/model/loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .transport import TransportType

TRANSPORTS_FILE = "transports.yml"

#: Catalog shipped inside the package.
DEFAULT_METADATA_DIR = Path(__file__).resolve().parent.parent / "metadata"


def _required_str(entry: Mapping[str, Any], key: str, tid: int) -> str:
    value = entry.get(key)
    if not value:
        raise ValueError(f"Transport {tid} is missing '{key}'")
    return str(value)


def parse_transport(tid: int, entry: Any) -> TransportType:
    """Validate one catalog entry and build its TransportType."""
    if not isinstance(entry, dict):
        raise ValueError(f"Transport {tid} entry must be a mapping")

    label = _required_str(entry, "label", tid)
    driver = _required_str(entry, "driver", tid)
    key_param = _required_str(entry, "key_param", tid)

    params = entry.get("params") or {}
    if not isinstance(params, dict):
        raise ValueError(f"Transport {tid} 'params' must be a mapping")
    for name, spec in params.items():
        if not isinstance(spec, dict):
            raise ValueError(f"Transport {tid} param '{name}' must be a mapping")
    if key_param not in params:
        raise ValueError(f"Transport {tid} key_param '{key_param}' not defined in params")

    # value types are checked later, by TransportParamResolver
    return TransportType(type_id=tid, label=label, driver=driver, params=params, key_param=key_param)


class MetadataLoader:
    """
    Reads transports.yml into TransportType models.

    After load_all(): self.transports maps type_id -> TransportType.
    Labels double as CLI names, so they must be unique (case-insensitive).
    """

    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else DEFAULT_METADATA_DIR
        self.transports: Dict[int, TransportType] = {}

    def _load_yaml(self, filename: str) -> dict:
        full_path = self.config_dir / filename
        if not full_path.exists():
            raise FileNotFoundError(f"Missing metadata file: {full_path}")

        with open(full_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def load_all(self) -> None:
        data = self._load_yaml(TRANSPORTS_FILE)
        root = data.get("transports")
        if not isinstance(root, dict):
            raise ValueError(f"{TRANSPORTS_FILE} is missing 'transports' root node")

        loaded: Dict[int, TransportType] = {}
        by_label: Dict[str, int] = {}
        for tid_raw, entry in root.items():
            t = parse_transport(int(tid_raw), entry)
            key = t.label.strip().lower()
            if key in by_label:
                raise ValueError(f"Transport {t.type_id} reuses label '{t.label}' of transport {by_label[key]}")
            by_label[key] = t.type_id
            loaded[t.type_id] = t

        self.transports = loaded

    def get_transport(self, tid: int) -> Optional[TransportType]:
        return self.transports.get(tid)
