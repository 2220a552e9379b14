import logging
from datetime import timedelta
from typing import Any, Optional, Union
from urllib.parse import urlsplit

from dasbus.client.proxy import InterfaceProxy
from dasbus.connection import MessageBus

from mpris_remote import aio, util
from mpris_remote.const import (
    DEFAULT_TIMEOUT_MS,
    IFACE_PLAYER,
    IFACE_PROPERTIES,
    OBJECT_PATH,
    PROP_METADATA,
    bus_name,
)
from mpris_remote.errors import (
    InvalidArgument,
    InvalidPlayer,
    PropertyNotFound,
    ReadOnlyProperty,
    UnknownProperty,
)
from mpris_remote.specification import find_property
from mpris_remote.value import Kind, Value, kind_of


_LOGGER = logging.getLogger(__name__)

Offset = Union[timedelta, float, int]


def to_microseconds(offset: Offset) -> int:
    """Converts a timedelta, or a count of seconds, to microseconds."""
    if isinstance(offset, timedelta):
        return offset // timedelta(microseconds=1)
    return round(offset * 1000 * 1000)


class Player(object):
    """
    Controls one MPRIS player.

    Obtain instances through ``Player.try_new()``.  Each coroutine below
    makes exactly one D-Bus call and raises TransportError if it fails.
    """

    def __init__(
        self,
        name: str,
        bus: MessageBus,
        timeout: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.name = name
        self.bus = bus
        self.timeout = timeout
        self._control_proxy: Optional[InterfaceProxy] = None
        self._properties_proxy: Optional[InterfaceProxy] = None

    def __str__(self) -> str:
        return "<Player %s>" % self.bus_name

    @property
    def bus_name(self) -> str:
        return bus_name(self.name)

    @classmethod
    async def try_new(
        cls,
        name: str,
        bus: MessageBus,
        timeout: Optional[int] = None,
    ) -> "Player":
        """
        Returns a Player for ``name`` (``vlc`` for
        ``org.mpris.MediaPlayer2.vlc``), or raises InvalidPlayer if no
        MPRIS player owns that name.
        """
        if timeout is None:
            timeout = DEFAULT_TIMEOUT_MS
        if not await util.validate(name, bus, timeout):
            raise InvalidPlayer(name)
        _LOGGER.debug("Validated player %s", bus_name(name))
        return cls(name, bus, timeout)

    @property
    def control_proxy(self) -> InterfaceProxy:
        if self._control_proxy is None:
            self._control_proxy = util.player_proxy(
                self.bus,
                self.name,
                IFACE_PLAYER,
            )
        return self._control_proxy

    @property
    def properties_proxy(self) -> InterfaceProxy:
        if self._properties_proxy is None:
            self._properties_proxy = util.player_proxy(
                self.bus,
                self.name,
                IFACE_PROPERTIES,
            )
        return self._properties_proxy

    async def _control(self, method: str, *args: Any) -> None:
        await aio.call(self.control_proxy, method, *args, timeout=self.timeout)

    async def next(self) -> None:
        """Skips to the next track."""
        await self._control("Next")

    async def previous(self) -> None:
        """Skips to the previous track."""
        await self._control("Previous")

    async def pause(self) -> None:
        await self._control("Pause")

    async def play(self) -> None:
        """Starts or resumes the current track."""
        await self._control("Play")

    async def play_pause(self) -> None:
        await self._control("PlayPause")

    async def stop(self) -> None:
        await self._control("Stop")

    async def get_metadata_property(self, key: str) -> Value:
        """
        Returns one entry of the player's metadata, such as
        ``xesam:title`` or ``mpris:length``.  Raises PropertyNotFound if
        the player does not report it.
        """
        metadata = await self.get_property(PROP_METADATA, Kind.DICT)
        try:
            return metadata.data[key]
        except KeyError:
            raise PropertyNotFound(key) from None

    async def get_property(self, name: str, kind: Optional[Kind] = None) -> Value:
        """
        Retrieves the value of an MPRIS property, e.g. ``Volume``.

        If ``kind`` is given, raises TypeMismatch unless the player sent a
        value of that type.
        """
        prop = find_property(name)
        if prop is None:
            raise UnknownProperty(name)
        reply = await aio.call(
            self.properties_proxy,
            "Get",
            prop.interface_name,
            name,
            timeout=self.timeout,
        )
        value = Value.from_wire(reply)
        if kind is not None:
            value.expect(kind)
        return value

    async def set_property(self, name: str, value: Any) -> None:
        """
        Sets a writable MPRIS property.  ``value`` is either a Value or a
        plain Python value compatible with the property's type.
        """
        prop = find_property(name)
        if prop is None:
            raise UnknownProperty(name)
        if not prop.writable:
            raise ReadOnlyProperty(name)
        wire = Value.coerce(kind_of(prop.type), value)
        await aio.call(
            self.properties_proxy,
            "Set",
            prop.interface_name,
            name,
            wire.to_variant(),
            timeout=self.timeout,
        )

    async def seek(self, offset: Offset) -> None:
        """Seeks forward by ``offset``, a timedelta or seconds."""
        offset_us = Value.coerce(Kind.INT64, to_microseconds(offset))
        await self._control("Seek", offset_us.data)

    async def seek_reverse(self, offset: Offset) -> None:
        """Same as ``seek()``, but backwards."""
        offset_us = Value.coerce(Kind.INT64, -to_microseconds(offset))
        await self._control("Seek", offset_us.data)

    async def set_position(
        self,
        position: int,
        track_id: Optional[str] = None,
    ) -> None:
        """
        Moves to ``position`` microseconds into the track.  Players ignore
        the request when ``track_id`` is not the current track's
        ``mpris:trackid``; without one, the player's object path is sent,
        which only lenient players accept.
        """
        if track_id is None:
            track_id = OBJECT_PATH
        track = Value.coerce(Kind.OBJECT_PATH, track_id)
        position_us = Value.coerce(Kind.INT64, position)
        await self._control("SetPosition", track.data, position_us.data)

    async def open_uri(self, uri: str) -> None:
        if not urlsplit(uri).scheme:
            raise InvalidArgument("URI %r has no scheme" % uri)
        await self._control("OpenUri", uri)


if __name__ == "__main__":
    import asyncio
    import sys

    from mpris_remote.connection import Connection

    async def main(name: str) -> None:
        async with Connection() as conn:
            player = await Player.try_new(name, conn.bus)
            title = await player.get_metadata_property("xesam:title")
            print("%s is playing %s" % (player, title.native))

    asyncio.run(main(sys.argv[1]))
