import logging
import re
from typing import Any, cast

from dasbus.client.proxy import InterfaceProxy
from dasbus.connection import MessageBus

from mpris_remote import aio
from mpris_remote.const import (
    BUS_NAME_PREFIX,
    DBUS_NAME,
    DBUS_PATH,
    DEFAULT_TIMEOUT_MS,
    IFACE_ROOT,
    IFACE_PROPERTIES,
    OBJECT_PATH,
    PROP_IDENTITY,
    bus_name,
)
from mpris_remote.errors import TransportError
from mpris_remote.specification import DBusDaemonObjectHandler, MPRISObjectHandler


_LOGGER = logging.getLogger(__name__)

_ELEMENT = r"[A-Za-z_-][A-Za-z0-9_-]*"
_PLAYER_NAME = re.compile(r"^%s(\.%s)*$" % (_ELEMENT, _ELEMENT))
MAX_BUS_NAME_LENGTH = 255


def is_valid_name(name: str) -> bool:
    """
    Whether ``name`` can follow ``org.mpris.MediaPlayer2.`` in a
    well-known bus name, e.g. ``vlc`` or ``chromium.instance1234``.
    """
    if not isinstance(name, str):
        return False
    if len(BUS_NAME_PREFIX) + len(name) > MAX_BUS_NAME_LENGTH:
        return False
    return _PLAYER_NAME.match(name) is not None


def player_proxy(bus: MessageBus, name: str, interface: str) -> InterfaceProxy:
    return cast(
        InterfaceProxy,
        bus.get_proxy(
            bus_name(name),
            OBJECT_PATH,
            interface_name=interface,
            handler_factory=MPRISObjectHandler,
        ),
    )


async def validate(
    name: str,
    bus: MessageBus,
    timeout: int = DEFAULT_TIMEOUT_MS,
) -> bool:
    """
    Checks that ``name`` is owned on the bus and answers as an MPRIS player.

    Names that are not valid bus name elements are rejected without
    talking to the bus.  Errors from the bus daemon itself propagate.
    """
    if not is_valid_name(name):
        _LOGGER.debug("Rejecting malformed player name %r", name)
        return False

    daemon: Any = bus.get_proxy(
        DBUS_NAME,
        DBUS_PATH,
        interface_name=DBUS_NAME,
        handler_factory=DBusDaemonObjectHandler,
    )
    owned = await aio.call(daemon, "NameHasOwner", bus_name(name), timeout=timeout)
    if not owned:
        _LOGGER.debug("Nobody owns %s", bus_name(name))
        return False

    props = player_proxy(bus, name, IFACE_PROPERTIES)
    try:
        await aio.call(props, "Get", IFACE_ROOT, PROP_IDENTITY, timeout=timeout)
    except TransportError as e:
        _LOGGER.debug("%s does not implement MPRIS: %s", bus_name(name), e)
        return False
    return True
