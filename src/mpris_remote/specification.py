"""
Static introspection data for MPRIS players.

Many players (Chromium among them) implement MPRIS without D-Bus
introspection, and others (VLC) omit the Seeked signal from the XML they
do publish.  Proxies built through ``MPRISObjectHandler`` never introspect
the remote object; they use the interfaces declared here instead.
"""

from typing import Any, Dict, Optional

from dasbus.client.handler import ClientObjectHandler
from dasbus.specification import DBusSpecification

from mpris_remote.const import IFACE_PLAYER, IFACE_ROOT


mpris_dbus_interface = """
<!DOCTYPE node PUBLIC "-//freedesktop//DTD D-BUS Object Introspection 1.0//EN"
"http://www.freedesktop.org/standards/dbus/1.0/introspect.dtd">
<node>
  <interface name="org.freedesktop.DBus.Properties">
    <method name="Get">
      <arg direction="in" type="s"/>
      <arg direction="in" type="s"/>
      <arg direction="out" type="v"/>
    </method>
    <method name="Set">
      <arg direction="in" type="s"/>
      <arg direction="in" type="s"/>
      <arg direction="in" type="v"/>
    </method>
    <method name="GetAll">
      <arg direction="in" type="s"/>
      <arg direction="out" type="a{sv}"/>
    </method>
    <signal name="PropertiesChanged">
      <arg type="s"/>
      <arg type="a{sv}"/>
      <arg type="as"/>
    </signal>
  </interface>
  <interface name="org.mpris.MediaPlayer2">
    <property name="Identity" type="s" access="read" />
    <property name="DesktopEntry" type="s" access="read" />
    <property name="SupportedMimeTypes" type="as" access="read" />
    <property name="SupportedUriSchemes" type="as" access="read" />
    <property name="HasTrackList" type="b" access="read" />
    <property name="CanQuit" type="b" access="read" />
    <property name="CanSetFullscreen" type="b" access="read" />
    <property name="Fullscreen" type="b" access="readwrite" />
    <property name="CanRaise" type="b" access="read" />
    <method name="Quit" />
    <method name="Raise" />
  </interface>
  <interface name="org.mpris.MediaPlayer2.Player">
    <property name="Metadata" type="a{sv}" access="read" />
    <property name="PlaybackStatus" type="s" access="read" />
    <property name="LoopStatus" type="s" access="readwrite" />
    <property name="Volume" type="d" access="readwrite" />
    <property name="Shuffle" type="b" access="readwrite" />
    <property name="Position" type="x" access="read" />
    <property name="Rate" type="d" access="readwrite" />
    <property name="MinimumRate" type="d" access="read" />
    <property name="MaximumRate" type="d" access="read" />
    <property name="CanControl" type="b" access="read" />
    <property name="CanPlay" type="b" access="read" />
    <property name="CanPause" type="b" access="read" />
    <property name="CanSeek" type="b" access="read" />
    <property name="CanGoNext" type="b" access="read" />
    <property name="CanGoPrevious" type="b" access="read" />
    <method name="Next" />
    <method name="Previous" />
    <method name="Pause" />
    <method name="PlayPause" />
    <method name="Stop" />
    <method name="Play" />
    <method name="Seek">
      <arg type="x" direction="in" />
    </method>
    <method name="OpenUri">
      <arg type="s" direction="in" />
    </method>
    <method name="SetPosition">
      <arg type="o" direction="in" />
      <arg type="x" direction="in" />
    </method>
    <signal name="Seeked">
      <arg type="x"/>
    </signal>
  </interface>
</node>
"""

MPRIS_SPECIFICATION = DBusSpecification.from_xml(mpris_dbus_interface)


def _index_properties(spec: DBusSpecification) -> Dict[str, Any]:
    props = {}
    for member in spec.members:
        if not isinstance(member, DBusSpecification.Property):
            continue
        if member.interface_name in (IFACE_ROOT, IFACE_PLAYER):
            props[member.name] = member
    return props


MPRIS_PROPERTIES = _index_properties(MPRIS_SPECIFICATION)


def find_property(name: str) -> Optional[Any]:
    """
    Returns the declaration of an MPRIS property, which carries its
    interface name, wire type and access flags.
    """
    return MPRIS_PROPERTIES.get(name)


class MPRISObjectHandler(ClientObjectHandler):
    def __init__(self, *a: Any, **kw: Any) -> None:
        super().__init__(*a, **kw)
        self._specification = MPRIS_SPECIFICATION


dbus_daemon_interface = """
<node>
  <interface name="org.freedesktop.DBus">
    <method name="NameHasOwner">
      <arg direction="in" type="s"/>
      <arg direction="out" type="b"/>
    </method>
  </interface>
</node>
"""

DBUS_DAEMON_SPECIFICATION = DBusSpecification.from_xml(dbus_daemon_interface)


class DBusDaemonObjectHandler(ClientObjectHandler):
    """Talks to the bus daemon without introspecting it first."""

    def __init__(self, *a: Any, **kw: Any) -> None:
        super().__init__(*a, **kw)
        self._specification = DBUS_DAEMON_SPECIFICATION
