from __future__ import annotations

import argparse
import json
import logging
import threading

import pytest

from tether.app.config import TetherConfig
from tether.app.manager import SessionManager
from tether.cli import commands
from tether.core.errors import DeviceConnectError
from tether.transport.base import Transport
from tether.transport.errors import TransportOpenError


class ScriptedTransport(Transport):
    """Connects unless unreachable; replays scripted inbound chunks and records writes."""

    def __init__(self, inbound=(), reachable=True):
        self._lock = threading.Lock()
        self._open = False
        self.inbound = list(inbound)
        self.reachable = reachable
        self.writes = []

    def open(self):
        if not self.reachable:
            raise TransportOpenError("peer out of range")
        self._open = True

    def close(self):
        self._open = False

    def streaming(self):
        return self._open

    def read(self):
        with self._lock:
            return self.inbound.pop(0) if self.inbound else ""

    def write(self, text):
        with self._lock:
            self.writes.append(text)
        return len(text)


@pytest.fixture
def install_manager(monkeypatch):
    """Route the CLI commands to a SessionManager over a scripted transport."""
    made = {}

    def install(transport, tweak=None):
        def make(args, *, transport_type_id, transport_overrides):
            cfg = TetherConfig(
                transport_type_id=transport_type_id,
                idle_wait_s=0.001,
                connect_retry_s=0.01,
                join_timeout_s=1.0,
            )
            manager = SessionManager(cfg, transport_builder=lambda address: transport, logger=logging.getLogger("test"))
            if tweak is not None:
                tweak(manager)
            made["manager"] = manager
            return manager

        monkeypatch.setattr(commands, "_make_manager", make)
        return made

    return install


def _send_args(command="LED ON", wait_s=1.0, linger_s=0.0):
    return argparse.Namespace(command=command, wait_s=wait_s, linger_s=linger_s, metadata_dir=None)


def test_send_writes_command_before_stopping_without_linger(install_manager, capsys):
    transport = ScriptedTransport()
    install_manager(transport)

    rc = commands.cmd_send(_send_args(linger_s=0.0), transport_type_id=1, address="AA", transport_overrides={})

    assert rc == 0
    assert transport.writes == ["LED ON\n"]
    out = capsys.readouterr().out
    assert "AA CONNECTED" in out
    assert "SENT 'LED ON'" in out


def test_send_raises_when_device_never_connects(install_manager, capsys):
    transport = ScriptedTransport(reachable=False)
    install_manager(transport)

    with pytest.raises(DeviceConnectError) as ei:
        commands.cmd_send(_send_args(wait_s=0.1), transport_type_id=1, address="AA", transport_overrides={})

    assert ei.value.code == "device_connect_error"
    assert transport.writes == []
    assert "SENT" not in capsys.readouterr().out


def test_send_raises_when_command_is_rejected(install_manager, capsys):
    transport = ScriptedTransport()

    def reject(manager):
        manager.send_command = lambda address, text: False

    install_manager(transport, tweak=reject)

    with pytest.raises(DeviceConnectError, match="rejected"):
        commands.cmd_send(_send_args(), transport_type_id=1, address="AA", transport_overrides={})

    assert transport.writes == []
    assert "SENT" not in capsys.readouterr().out


def test_monitor_prints_last_position_and_records(install_manager, tmp_path, capsys):
    transport = ScriptedTransport(inbound=["POS 100 200 300\n"])
    install_manager(transport)
    record = tmp_path / "events.jsonl"
    args = argparse.Namespace(secs=0.3, record=str(record), metadata_dir=None)

    rc = commands.cmd_monitor(args, transport_type_id=1, address="AA", transport_overrides={})

    assert rc == 0
    out = capsys.readouterr().out
    assert f"Recording: {record}" in out
    assert "Monitoring AA" in out
    assert "AA POSITION x=1.0 y=2.0 z=3.0" in out
    assert "Last position: x=1.0 y=2.0 z=3.0 cm" in out

    rows = [json.loads(line) for line in record.read_text(encoding="utf-8").splitlines()]
    kinds = [r["kind"] for r in rows]
    assert kinds[:2] == ["connected", "position"]
    assert rows[1]["x"] == 1.0
