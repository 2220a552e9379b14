from typing import Any, List, Optional, Tuple

from dasbus.error import DBusError


class MPRISError(DBusError):
    pass


class InvalidPlayer(MPRISError):
    def __init__(self, name: str) -> None:
        MPRISError.__init__(self, "The provided player %r was invalid." % name)
        self.name = name


class InvalidArgument(MPRISError, ValueError):
    pass


class UnknownProperty(InvalidArgument):
    def __init__(self, name: str) -> None:
        InvalidArgument.__init__(self, "No MPRIS property named %r" % name)
        self.name = name


class ReadOnlyProperty(InvalidArgument):
    def __init__(self, name: str) -> None:
        InvalidArgument.__init__(self, "MPRIS property %r is read-only" % name)
        self.name = name


class PropertyNotFound(MPRISError, LookupError):
    def __init__(self, name: str) -> None:
        MPRISError.__init__(self, "Player did not report %r" % name)
        self.name = name


class TypeMismatch(MPRISError, TypeError):
    pass


class TransportError(MPRISError):
    """
    A call, property access or signal (de)registration failed on the bus.

    The original exception is chained as ``__cause__``.  When the failure
    was a D-Bus error reply, its error name is kept in ``dbus_name``.
    """

    def __init__(self, message: str, dbus_name: Optional[str] = None) -> None:
        MPRISError.__init__(self, message)
        self.dbus_name = dbus_name

    @classmethod
    def from_exception(cls, what: str, exc: BaseException) -> "TransportError":
        err = cls("%s: %s" % (what, exc), getattr(exc, "dbus_name", None))
        err.__cause__ = exc
        return err


class ClearCallbacksError(TransportError):
    def __init__(self, failures: List[Tuple[Any, BaseException]]) -> None:
        TransportError.__init__(
            self,
            "Could not remove %d signal subscription(s): %s"
            % (len(failures), "; ".join(str(e) for _, e in failures)),
        )
        self.failures = failures
