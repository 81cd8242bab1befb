from __future__ import annotations

import pytest

from tether.cli import main as main_mod
from tether.cli.args import cast_type_name, is_effectively_required, parse_args
from tether.cli.commands import PrintEventSink, cmd_transports
from tether.protocol.events import ButtonEvent, Connected


def test_parse_transports_command():
    args, tindex, type_id, address, overrides = parse_args(["transports"])
    assert args.cmd == "transports"
    assert type_id is None
    assert address == ""
    assert overrides == {}
    assert len(tindex.list()) == 2


def test_parse_monitor_rfcomm():
    args, _, type_id, address, overrides = parse_args(
        ["-v", "monitor", "--transport", "rfcomm", "--address", "00:11:22:33:44:55", "--channel", "3", "--secs", "2"]
    )
    assert args.cmd == "monitor"
    assert args.verbose == 1
    assert args.secs == 2.0
    assert type_id == 1
    assert address == "00:11:22:33:44:55"
    assert overrides == {"channel": 3}


def test_dashed_param_flag_maps_to_schema_name():
    _, _, _, _, overrides = parse_args(
        ["monitor", "--transport", "rfcomm", "--address", "AA", "--connect-timeout-s", "1.5"]
    )
    assert overrides == {"connect_timeout_s": 1.5}


def test_parse_send_uart_uses_port_as_address():
    args, _, type_id, address, overrides = parse_args(
        ["send", "--transport", "UART", "--port", "/dev/rfcomm0", "--command", "LED ON", "--baudrate", "9600"]
    )
    assert args.command == "LED ON"
    assert args.wait_s == 10.0
    assert type_id == 2
    assert address == "/dev/rfcomm0"
    assert overrides == {"baudrate": 9600}


def test_missing_address_flag_exits():
    with pytest.raises(SystemExit):
        parse_args(["monitor", "--transport", "rfcomm"])


def test_cast_type_name():
    assert cast_type_name("int") is int
    assert cast_type_name("float") is float
    assert cast_type_name("str") is str
    assert cast_type_name("bool")("true") is True


def test_is_effectively_required():
    assert is_effectively_required({"required": True}) is True
    assert is_effectively_required({"required": True, "default": 1}) is False
    assert is_effectively_required({}) is False


def test_print_sink_formats_and_flags_connected(capsys):
    sink = PrintEventSink()
    sink.on_event("AA", Connected())
    sink.on_event("AA", ButtonEvent(id=2, pressed=False))

    assert sink.connected.is_set()
    out = capsys.readouterr().out.splitlines()
    assert out == ["AA CONNECTED", "AA BUTTON id=2 pressed=False"]


def test_cmd_transports_prints_catalog(capsys):
    _, tindex, _, _, _ = parse_args(["transports"])
    assert cmd_transports(tindex=tindex) == 0
    out = capsys.readouterr().out
    assert "rfcomm (id=1, driver=rfcomm)" in out
    assert "key: port" in out


def test_main_reports_unknown_transport(capsys, monkeypatch):
    monkeypatch.setattr(main_mod, "configure_logging", lambda **kw: None)
    rc = main_mod.main(["monitor", "--transport", "usb", "--address", "x"])
    assert rc == 1
    out = capsys.readouterr().out
    assert "ERROR: Unknown transport 'usb'." in out
    assert "Hint:" in out
