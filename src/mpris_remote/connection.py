import logging
import threading
from typing import Any, Optional

from dasbus.connection import MessageBus, SessionMessageBus, SystemMessageBus
from dasbus.loop import EventLoop

import gi

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from mpris_remote import config  # noqa: E402


_LOGGER = logging.getLogger(__name__)


class Connection(object):
    """
    Owns a message bus and the GLib loop that delivers its replies and
    signals.

    Players and event managers borrow ``bus``; they must not outlive
    the connection.  The loop runs on a daemon thread between ``start()``
    and ``stop()``, or for the duration of an ``async with`` block.
    """

    def __init__(self, settings: Optional[config.Settings] = None) -> None:
        self.settings = settings if settings is not None else config.load()
        self.bus: MessageBus = (
            SystemMessageBus()
            if self.settings.bus == config.BUS_SYSTEM
            else SessionMessageBus()
        )
        self.loop = EventLoop()
        self.thread = threading.Thread(target=self.loop.run, daemon=True)

    @property
    def timeout(self) -> int:
        return self.settings.timeout_ms

    def start(self) -> None:
        _LOGGER.debug("Starting GLib loop for the %s bus", self.settings.bus)
        self.thread.start()

    def stop(self) -> None:
        def quit() -> bool:
            self.loop.quit()
            return False

        if self.thread.is_alive():
            # Scheduled so a stop() racing the thread startup is not lost.
            GLib.idle_add(quit)
            _LOGGER.debug("Joining GLib loop thread")
            self.thread.join()
        self.bus.disconnect()
        _LOGGER.debug("Disconnected from the %s bus", self.settings.bus)

    async def __aenter__(self) -> "Connection":
        self.start()
        return self

    async def __aexit__(self, *unused: Any) -> None:
        self.stop()
