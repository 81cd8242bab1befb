# tether/cli/args.py
from __future__ import annotations

import argparse
from typing import Any, Mapping, Optional, Tuple

from tether.app.transport_index import TransportIndex


# ---------------- transport helpers (CLI-local) ----------------

def cast_type_name(type_name: Any):
    """
    Cast argparse values based on metadata schema type strings.

    NOTE: This only affects CLI parsing. TransportParamResolver still
    validates/casts strictly.
    """
    if type_name == "int":
        return int
    if type_name == "float":
        return float
    if type_name == "bool":

        def _to_bool(v: str) -> bool:
            s = str(v).strip().lower()
            if s in ("1", "true"):
                return True
            if s in ("0", "false"):
                return False
            raise argparse.ArgumentTypeError(f"Invalid bool literal '{v}' (use true/false)")

        return _to_bool

    return str


def is_effectively_required(spec: Mapping[str, Any]) -> bool:
    if "default" in spec:
        return False
    return bool(spec.get("required", False))


# ---------------- argparse (two-stage) ----------------

def _add_global_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--metadata-dir", default=None, help="Directory holding transports.yml (default: bundled).")
    p.add_argument("--log-file", default=None, help="Also write logs to this file.")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug.")


def _add_command_args(sub) -> Tuple[argparse.ArgumentParser, argparse.ArgumentParser]:
    p_monitor = sub.add_parser("monitor", help="Run a session and print its events.")
    p_monitor.add_argument("--secs", type=float, default=None, help="Stop after N seconds (default: until Ctrl-C).")
    p_monitor.add_argument("--record", default=None, help="Record events as JSON lines to this path.")

    p_send = sub.add_parser("send", help="Connect, send one command, print the replies.")
    p_send.add_argument("--command", required=True, help="Command text (without newline).")
    p_send.add_argument("--wait-s", type=float, default=10.0, help="Max wait for the device to connect, and again for the command to go out.")
    p_send.add_argument("--linger-s", type=float, default=1.0, help="Keep printing events this long after sending.")
    return p_monitor, p_send


def build_base_parser() -> argparse.ArgumentParser:
    """
    Stage 1 parser: parse only command + --transport + app-level args.
    Transport params are NOT declared here.
    """
    parser = argparse.ArgumentParser(prog="tether")
    _add_global_flags(parser)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("transports", help="List the transport catalog.")

    p_monitor, p_send = _add_command_args(sub)
    for p in (p_monitor, p_send):
        p.add_argument("--transport", required=True, help="Transport label (see: tether transports).")

    return parser


def build_full_parser_for(*, tindex: TransportIndex, transport_type_id: int) -> argparse.ArgumentParser:
    """
    Stage 2 parser: includes dynamic transport param flags based on metadata.
    """
    meta = tindex.meta_for_type_id(transport_type_id)
    params: Mapping[str, Mapping[str, Any]] = meta.params
    key_param = meta.key_param

    parser = argparse.ArgumentParser(prog="tether")
    _add_global_flags(parser)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("transports")

    def add_transport_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("--transport", required=True)

        # key param (the session address) first, always required
        p.add_argument(
            f"--{key_param}",
            dest=key_param,
            required=True,
            type=cast_type_name(params[key_param].get("type")),
            help=params[key_param].get("help") or f"Device address for '{meta.label}'.",
        )

        for name in meta.option_names:
            spec = params[name]
            p.add_argument(
                f"--{name.replace('_', '-')}",
                dest=name,
                default=None,
                type=cast_type_name(spec.get("type")),
                help=spec.get("help") or f"Transport param for '{meta.label}' (default: {spec.get('default')!r}).",
            )

    for p in _add_command_args(sub):
        add_transport_flags(p)

    return parser


def parse_args(
    argv: Optional[list[str]] = None,
) -> Tuple[argparse.Namespace, TransportIndex, Optional[int], str, dict]:
    """
    Returns: (args, tindex, transport_type_id, address, overrides)

    - transport_type_id is None and address is "" for 'transports'
    - address is the key param value, removed from overrides
    - overrides contains only non-None transport param values
    """
    base_parser = build_base_parser()
    base, _unknown = base_parser.parse_known_args(argv)

    tindex = TransportIndex.load(metadata_dir=base.metadata_dir)

    if base.cmd == "transports":
        return base, tindex, None, "", {}

    type_id = tindex.resolve_type_id_by_label(base.transport)

    full_parser = build_full_parser_for(
        tindex=tindex,
        transport_type_id=type_id,
    )
    args = full_parser.parse_args(argv)

    meta = tindex.meta_for_type_id(type_id)
    address = str(getattr(args, meta.key_param))

    overrides = {
        name: getattr(args, name)
        for name in meta.option_names
        if getattr(args, name, None) is not None
    }

    return args, tindex, type_id, address, overrides
