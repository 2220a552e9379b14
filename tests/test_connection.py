import asyncio
import threading
from typing import Any, Callable, List

import pytest

from mpris_remote import config, connection
from mpris_remote.connection import Connection


class FakeMessageBus(object):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.disconnected = False

    def disconnect(self) -> None:
        self.disconnected = True


class FakeEventLoop(object):
    def __init__(self) -> None:
        self.running = threading.Event()
        self.quitting = threading.Event()

    def run(self) -> None:
        self.running.set()
        self.quitting.wait(5)

    def quit(self) -> None:
        self.quitting.set()


class FakeGLib(object):
    def __init__(self) -> None:
        self.scheduled: List[Callable[[], bool]] = []

    def idle_add(self, function: Callable[[], bool]) -> None:
        self.scheduled.append(function)
        function()


@pytest.fixture
def fake_glib(monkeypatch: Any) -> FakeGLib:
    glib = FakeGLib()
    monkeypatch.setattr(
        connection, "SessionMessageBus", lambda: FakeMessageBus("session")
    )
    monkeypatch.setattr(
        connection, "SystemMessageBus", lambda: FakeMessageBus("system")
    )
    monkeypatch.setattr(connection, "EventLoop", FakeEventLoop)
    monkeypatch.setattr(connection, "GLib", glib)
    return glib


@pytest.mark.parametrize("bus", [config.BUS_SESSION, config.BUS_SYSTEM])
def test_bus_follows_settings(fake_glib: FakeGLib, bus: str) -> None:
    conn = Connection(config.Settings(bus=bus, timeout_ms=250))
    assert conn.bus.kind == bus
    assert conn.timeout == 250


def test_settings_default_to_config_file(fake_glib: FakeGLib, monkeypatch: Any) -> None:
    monkeypatch.setattr(
        config, "load", lambda: config.Settings(bus=config.BUS_SYSTEM)
    )
    conn = Connection()
    assert conn.bus.kind == config.BUS_SYSTEM


def test_stop_without_start(fake_glib: FakeGLib) -> None:
    conn = Connection(config.Settings())
    conn.stop()
    assert conn.bus.disconnected
    assert fake_glib.scheduled == []


def test_start_stop(fake_glib: FakeGLib) -> None:
    conn = Connection(config.Settings())
    conn.start()
    assert conn.loop.running.wait(5)
    assert conn.thread.daemon
    conn.stop()
    assert not conn.thread.is_alive()
    assert conn.loop.quitting.is_set()
    assert len(fake_glib.scheduled) == 1
    assert conn.bus.disconnected


def test_async_with(fake_glib: FakeGLib) -> None:
    async def use() -> Connection:
        async with Connection(config.Settings()) as conn:
            assert conn.thread.is_alive()
            assert not conn.bus.disconnected
        return conn

    conn = asyncio.run(use())
    assert not conn.thread.is_alive()
    assert conn.bus.disconnected
