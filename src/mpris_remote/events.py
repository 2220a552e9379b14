import asyncio
import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from dasbus.connection import MessageBus
from dasbus.constants import DBUS_FLAG_NONE
from dasbus.error import DBusError
from dasbus.typing import Variant, get_native

import gi

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from mpris_remote.const import (  # noqa: E402
    OBJECT_PATH,
    SIGNAL_PROPERTIES_CHANGED,
    SIGNAL_SEEKED,
)
from mpris_remote.errors import (  # noqa: E402
    ClearCallbacksError,
    InvalidArgument,
    TransportError,
)


_LOGGER = logging.getLogger(__name__)

_MEMBER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PATH = re.compile(r"^/$|^(/[A-Za-z0-9_]+)+$")
_INTERFACE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)+$")
_UNIQUE_NAME = r":[A-Za-z0-9_-]+(\.[A-Za-z0-9_-]+)+"
_WELL_KNOWN_NAME = r"[A-Za-z_-][A-Za-z0-9_-]*(\.[A-Za-z_-][A-Za-z0-9_-]*)+"
_SENDER = re.compile(r"^(%s|%s)$" % (_UNIQUE_NAME, _WELL_KNOWN_NAME))
MAX_NAME_LENGTH = 255


class EventType(enum.Enum):
    """Which MPRIS signal to listen for.  The value is the signal name."""

    # Emitted whenever player properties change.  The list of properties
    # that cause it is in the MPRIS Player interface documentation.
    PROPERTIES_CHANGED = SIGNAL_PROPERTIES_CHANGED
    # Emitted whenever the active track is seeked.
    SEEKED = SIGNAL_SEEKED


@dataclass(frozen=True)
class MatchRule(object):
    member: str
    path: str
    interface: Optional[str] = None
    sender: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.member) > MAX_NAME_LENGTH or not _MEMBER.match(self.member):
            raise InvalidArgument("Invalid signal member %r" % self.member)
        if not _PATH.match(self.path):
            raise InvalidArgument("Invalid object path %r" % self.path)
        if self.interface is not None and (
            len(self.interface) > MAX_NAME_LENGTH
            or not _INTERFACE.match(self.interface)
        ):
            raise InvalidArgument("Invalid interface %r" % self.interface)
        if self.sender is not None and (
            len(self.sender) > MAX_NAME_LENGTH or not _SENDER.match(self.sender)
        ):
            raise InvalidArgument("Invalid sender %r" % self.sender)

    def match_string(self) -> str:
        parts = ["type='signal'"]
        for key in ("sender", "interface", "member", "path"):
            value = getattr(self, key)
            if value is not None:
                parts.append("%s='%s'" % (key, value))
        return ",".join(parts)


@dataclass(frozen=True)
class Signal(object):
    """A signal received from a player."""

    sender: str
    path: str
    interface: str
    member: str
    parameters: Optional[Variant]

    @property
    def body(self) -> Tuple[Any, ...]:
        if self.parameters is None:
            return ()
        return tuple(get_native(self.parameters))


Callback = Callable[[Signal], bool]


class Subscription(object):
    def __init__(
        self,
        event_type: EventType,
        rule: MatchRule,
        callback: Callback,
    ) -> None:
        self.event_type = event_type
        self.rule = rule
        self.callback = callback
        self.token = 0
        self.active = False

    def __repr__(self) -> str:
        return "<Subscription %s to %s>" % (self.token, self.rule.match_string())


class EventManager(object):
    """
    Adds and removes callbacks for MPRIS signals on a message bus.

    The manager borrows the bus and never closes it.  Every subscription
    it hands out stays recorded until it is removed from the bus, either
    by ``clear_callbacks()`` or because its callback returned False.
    """

    def __init__(self, bus: MessageBus) -> None:
        self.bus = bus
        self._subscriptions: List[Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    @property
    def subscriptions(self) -> Tuple[Subscription, ...]:
        return tuple(self._subscriptions)

    async def add_callback(
        self,
        event_type: EventType,
        callback: Callback,
        sender: Optional[str] = None,
    ) -> Subscription:
        """
        Calls ``callback`` with every matching signal until it returns
        False.  Signals from any player are delivered unless ``sender``
        names one bus name.

        The callback runs on the asyncio loop that added it.

        Example::

            manager = EventManager(bus)

            def seeked(signal):
                print("Now at", signal.body[0])
                return True

            await manager.add_callback(EventType.SEEKED, seeked)
        """
        rule = MatchRule(member=event_type.value, path=OBJECT_PATH, sender=sender)
        subscription = Subscription(event_type, rule, callback)
        loop = asyncio.get_running_loop()

        def on_signal(
            unused_connection: Any,
            sender_name: str,
            object_path: str,
            interface_name: str,
            signal_name: str,
            parameters: Variant,
        ) -> None:
            signal = Signal(
                sender_name,
                object_path,
                interface_name,
                signal_name,
                parameters,
            )
            try:
                loop.call_soon_threadsafe(self._dispatch, subscription, signal)
            except RuntimeError:
                # The asyncio loop is closed.
                _LOGGER.debug("Dropping %s for %s", signal_name, subscription)

        try:
            token = self.bus.connection.signal_subscribe(
                rule.sender,
                rule.interface,
                rule.member,
                rule.path,
                None,
                DBUS_FLAG_NONE,
                on_signal,
            )
        except (DBusError, GLib.Error) as e:
            raise TransportError.from_exception(
                "Cannot add match %s" % rule.match_string(), e
            ) from e
        if not token:
            raise TransportError("Cannot add match %s" % rule.match_string())

        subscription.token = token
        subscription.active = True
        self._subscriptions.append(subscription)
        _LOGGER.debug("Added %s", subscription)
        return subscription

    async def clear_callbacks(self) -> None:
        """
        Removes every subscription from the bus.

        A failed removal does not stop the others from being attempted.
        Subscriptions removed successfully are forgotten; the ones that
        failed stay recorded and are reported in a ClearCallbacksError.
        """
        failures: List[Tuple[Subscription, BaseException]] = []
        for subscription in list(self._subscriptions):
            try:
                self._remove(subscription)
            except TransportError as e:
                _LOGGER.warning("Cannot remove %s: %s", subscription, e)
                failures.append((subscription, e))
        if failures:
            raise ClearCallbacksError(failures)

    def _remove(self, subscription: Subscription) -> None:
        try:
            self.bus.connection.signal_unsubscribe(subscription.token)
        except (DBusError, GLib.Error) as e:
            raise TransportError.from_exception(
                "Cannot remove match %s" % subscription.rule.match_string(), e
            ) from e
        subscription.active = False
        self._subscriptions.remove(subscription)
        _LOGGER.debug("Removed %s", subscription)

    def _dispatch(self, subscription: Subscription, signal: Signal) -> None:
        if not subscription.active:
            return
        try:
            keep = subscription.callback(signal)
        except Exception:
            _LOGGER.exception("Callback of %s failed", subscription)
            return
        if keep:
            return
        try:
            self._remove(subscription)
        except TransportError as e:
            _LOGGER.warning("Cannot remove finished %s: %s", subscription, e)
