# tether/cli/commands.py
from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Mapping, Optional

from tether.app.config import TetherConfig
from tether.app.manager import SessionManager
from tether.app.transport_index import TransportIndex
from tether.core.errors import DeviceConnectError
from tether.core.recording.events import EventTraceLogger
from tether.interfaces.event_sink import EventSink
from tether.protocol.events import Connected, TetherEvent

from tether.cli.args import is_effectively_required


# ---------------- Event sink ----------------

class PrintEventSink(EventSink):
    """Print events to stdout, one line each."""

    def __init__(self) -> None:
        self.connected = threading.Event()

    def on_event(self, address: str, event: TetherEvent) -> None:
        if isinstance(event, Connected):
            self.connected.set()
        fields = {k: v for k, v in event.as_dict().items() if k != "kind"}
        suffix = " ".join(f"{k}={v}" for k, v in fields.items())
        print(f"{address} {event.kind.upper()} {suffix}".rstrip())

    def close(self) -> None:
        return None


# ---------------- Logging ----------------

def configure_logging(*, verbose: int = 0, log_file: Optional[str] = None) -> None:
    """
    Console handler at WARNING/INFO/DEBUG plus an optional file handler.
    Kept in CLI (presentation-layer concern).
    """
    level = logging.WARNING if verbose <= 0 else logging.INFO if verbose == 1 else logging.DEBUG
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    root = logging.getLogger()
    root.setLevel(min(level, logging.INFO) if log_file else level)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file:
        configure_file_logging(Path(log_file))


def configure_file_logging(app_log_path: Path) -> None:
    """
    Add a file handler to the root logger (idempotent).
    """
    root = logging.getLogger()
    app_log_path.parent.mkdir(parents=True, exist_ok=True)
    target = str(app_log_path.resolve())

    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(app_log_path, encoding="utf-8", delay=True)
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root.addHandler(fh)

    if root.level > logging.INFO:
        root.setLevel(logging.INFO)


# ---------------- Commands ----------------

def cmd_transports(*, tindex: TransportIndex) -> int:
    print("Available transports:\n")
    print("Usage:")
    print("  tether <monitor|send> --transport <label> --<key> <address> [--<param> <value> ...]\n")

    for t in tindex.list():
        params: Mapping[str, Mapping[str, Any]] = t.params

        print(f"{t.label} (id={t.type_id}, driver={t.driver})")
        print(f"  key: {t.key_param}")

        opts = []
        for name in t.option_names:
            spec = params[name]
            if "default" in spec:
                opts.append(f"{name}={spec['default']!r}")
            elif is_effectively_required(spec):
                opts.append(f"{name}=<required>")
            else:
                opts.append(f"{name}=<optional>")
        if opts:
            print("  options: " + ", ".join(opts))
        print()

    return 0


def _make_manager(args, *, transport_type_id: int, transport_overrides: dict) -> SessionManager:
    cfg = TetherConfig(
        transport_type_id=int(transport_type_id),
        transport_overrides=dict(transport_overrides),
        metadata_dir=args.metadata_dir,
    )
    return SessionManager(cfg, logger=logging.getLogger("tether"))


def cmd_monitor(args, *, transport_type_id: int, address: str, transport_overrides: dict) -> int:
    manager = _make_manager(args, transport_type_id=transport_type_id, transport_overrides=transport_overrides)
    recorder: Optional[EventTraceLogger] = None

    with manager:
        manager.subscribe(address, PrintEventSink())
        if args.record:
            recorder = EventTraceLogger(logger=logging.getLogger("tether.events"), file_path=Path(args.record))
            manager.subscribe(address, recorder)
            print(f"Recording: {args.record}")

        try:
            manager.start(address)
            print(f"Monitoring {address} (Ctrl-C to stop)")
            t0 = time.monotonic()
            while args.secs is None or time.monotonic() - t0 < args.secs:
                time.sleep(0.2)
        except KeyboardInterrupt:
            print()
        finally:
            manager.stop(address)
            session = manager.get(address)
            if session is not None and session.position is not None:
                pos = session.position
                print(f"Last position: x={pos.x} y={pos.y} z={pos.z} cm")

    if recorder is not None:
        recorder.close()
    return 0


def cmd_send(args, *, transport_type_id: int, address: str, transport_overrides: dict) -> int:
    manager = _make_manager(args, transport_type_id=transport_type_id, transport_overrides=transport_overrides)
    printer = PrintEventSink()

    with manager:
        manager.subscribe(address, printer)
        session = manager.start(address)

        if not printer.connected.wait(timeout=args.wait_s):
            raise DeviceConnectError(
                f"Device {address} did not connect within {args.wait_s:.1f}s.",
                hint="Check that the device is powered, paired and in range.",
                details={"address": address},
            )

        if not manager.send_command(address, args.command):
            raise DeviceConnectError(
                f"Device {address} rejected command {args.command!r}: session is not running.",
                details={"address": address, "command": args.command},
            )

        # the slot empties in the same supervisor step that writes it
        deadline = time.monotonic() + args.wait_s
        while session.status().pending_command is not None:
            if time.monotonic() >= deadline:
                raise DeviceConnectError(
                    f"Command {args.command!r} was not sent to {address} within {args.wait_s:.1f}s.",
                    hint="The link may have dropped; retry once the device reconnects.",
                    details={"address": address, "command": args.command},
                )
            time.sleep(0.01)

        print(f"SENT {args.command!r}")
        time.sleep(max(0.0, args.linger_s))
        manager.stop(address)

    return 0
