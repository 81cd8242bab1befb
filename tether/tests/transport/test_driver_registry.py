from __future__ import annotations

import pytest

from tether.transport.base import Transport
from tether.transport.errors import TransportError
from tether.transport.registry import TransportDriverRegistry
from tether.transport.rfcomm import RFCOMMTransport
from tether.transport.uart import UARTTransport


class DummyTransport(Transport):
    def __init__(self, address: str, x: int = 0):
        self.address = address
        self.x = x

    def open(self):
        pass

    def close(self):
        pass

    def streaming(self):
        return False

    def read(self):
        return ""

    def write(self, text):
        return len(text)


def test_default_registry_has_rfcomm_and_uart():
    reg = TransportDriverRegistry.default()
    assert reg.get_class("rfcomm") is RFCOMMTransport
    assert reg.get_class("uart") is UARTTransport


def test_lookup_is_case_insensitive():
    reg = TransportDriverRegistry({"Dummy": DummyTransport})
    assert reg.has("dummy")
    assert reg.has("DUMMY")
    assert reg.get_class("dUmMy") is DummyTransport


def test_create_passes_params():
    reg = TransportDriverRegistry({"dummy": DummyTransport})
    t = reg.create("dummy", address="AA", x=5)
    assert isinstance(t, DummyTransport)
    assert (t.address, t.x) == ("AA", 5)


def test_unknown_driver_raises():
    reg = TransportDriverRegistry({})
    assert reg.has("nope") is False
    with pytest.raises(TransportError):
        reg.get_class("nope")


def test_register_and_list_drivers():
    reg = TransportDriverRegistry()
    assert reg.drivers() == []
    reg.register("Loop", DummyTransport)
    assert reg.drivers() == ["loop"]
    assert reg.get_class("LOOP") is DummyTransport
