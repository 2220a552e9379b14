BUS_NAME_PREFIX = "org.mpris.MediaPlayer2."
OBJECT_PATH = "/org/mpris/MediaPlayer2"

IFACE_ROOT = "org.mpris.MediaPlayer2"
IFACE_PLAYER = "org.mpris.MediaPlayer2.Player"
IFACE_PROPERTIES = "org.freedesktop.DBus.Properties"

DBUS_NAME = "org.freedesktop.DBus"
DBUS_PATH = "/org/freedesktop/DBus"

SIGNAL_PROPERTIES_CHANGED = "PropertiesChanged"
SIGNAL_SEEKED = "Seeked"

PROP_IDENTITY = "Identity"
PROP_METADATA = "Metadata"

# Per-call D-Bus timeout, in milliseconds.
DEFAULT_TIMEOUT_MS = 5000


def bus_name(player: str) -> str:
    return BUS_NAME_PREFIX + player
