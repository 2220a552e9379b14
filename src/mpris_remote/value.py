import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict

from dasbus.typing import Variant

from mpris_remote.errors import TypeMismatch


_LOGGER = logging.getLogger(__name__)


class Kind(enum.Enum):
    """The wire types MPRIS properties and metadata entries are made of."""

    BOOLEAN = "b"
    INT32 = "i"
    UINT32 = "u"
    INT64 = "x"
    UINT64 = "t"
    DOUBLE = "d"
    STRING = "s"
    OBJECT_PATH = "o"
    STRING_ARRAY = "as"
    DICT = "a{sv}"


OBJECT_PATH_RE = re.compile(r"^/$|^(/[A-Za-z0-9_]+)+$")

INTEGER_RANGES = {
    Kind.INT32: (-(2**31), 2**31 - 1),
    Kind.UINT32: (0, 2**32 - 1),
    Kind.INT64: (-(2**63), 2**63 - 1),
    Kind.UINT64: (0, 2**64 - 1),
}


def kind_of(type_string: str) -> Kind:
    try:
        return Kind(type_string)
    except ValueError:
        raise TypeMismatch("Unsupported D-Bus type %r" % type_string) from None


@dataclass(frozen=True)
class Value(object):
    """
    A property or metadata value together with its D-Bus type.

    ``data`` is a plain Python value, except for dictionaries, whose
    entries are themselves ``Value`` instances so their types survive a
    round trip back to the player.
    """

    kind: Kind
    data: Any

    @classmethod
    def from_variant(cls, variant: Variant) -> "Value":
        type_string = variant.get_type_string()
        if type_string == "v":
            return cls.from_variant(variant.get_variant())
        kind = kind_of(type_string)
        if kind is Kind.DICT:
            entries: Dict[str, Value] = {}
            for i in range(variant.n_children()):
                entry = variant.get_child_value(i)
                key = entry.get_child_value(0).get_string()
                try:
                    entries[key] = cls.from_variant(entry.get_child_value(1))
                except TypeMismatch as e:
                    _LOGGER.debug("Dropping dictionary entry %s: %s", key, e)
            return cls(kind, entries)
        return cls(kind, variant.unpack())

    @classmethod
    def from_wire(cls, obj: Any) -> "Value":
        if isinstance(obj, Variant):
            return cls.from_variant(obj)
        return cls.from_native(obj)

    @classmethod
    def from_native(cls, obj: Any) -> "Value":
        """Infers the D-Bus type of a plain Python value."""
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, bool):
            return cls(Kind.BOOLEAN, obj)
        if isinstance(obj, int):
            return cls.coerce(Kind.INT64, obj)
        if isinstance(obj, float):
            return cls(Kind.DOUBLE, obj)
        if isinstance(obj, str):
            return cls(Kind.STRING, obj)
        if isinstance(obj, (list, tuple)):
            return cls.coerce(Kind.STRING_ARRAY, obj)
        if isinstance(obj, dict):
            return cls.coerce(Kind.DICT, obj)
        raise TypeMismatch("Cannot send %r over D-Bus" % (obj,))

    @classmethod
    def coerce(cls, kind: Kind, obj: Any) -> "Value":
        """Builds a value of the given kind, or raises TypeMismatch."""
        if isinstance(obj, Value):
            return obj.expect(kind)
        if kind is Kind.BOOLEAN and isinstance(obj, bool):
            return cls(kind, obj)
        if kind in INTEGER_RANGES:
            if isinstance(obj, int) and not isinstance(obj, bool):
                low, high = INTEGER_RANGES[kind]
                if low <= obj <= high:
                    return cls(kind, obj)
        elif kind is Kind.DOUBLE:
            if isinstance(obj, (int, float)) and not isinstance(obj, bool):
                return cls(kind, float(obj))
        elif kind is Kind.STRING:
            if isinstance(obj, str):
                return cls(kind, obj)
        elif kind is Kind.OBJECT_PATH:
            if isinstance(obj, str) and OBJECT_PATH_RE.match(obj):
                return cls(kind, obj)
        elif kind is Kind.STRING_ARRAY:
            if isinstance(obj, (list, tuple)) and all(isinstance(s, str) for s in obj):
                return cls(kind, list(obj))
        elif kind is Kind.DICT:
            if isinstance(obj, dict) and all(isinstance(k, str) for k in obj):
                return cls(kind, {k: cls.from_native(v) for k, v in obj.items()})
        raise TypeMismatch("%r is not a valid %s" % (obj, kind.name))

    def expect(self, kind: Kind) -> "Value":
        if self.kind is not kind:
            raise TypeMismatch(
                "Expected %s, player sent %s" % (kind.name, self.kind.name),
            )
        return self

    def to_variant(self) -> Variant:
        if self.kind is Kind.DICT:
            return Variant(
                self.kind.value,
                {k: v.to_variant() for k, v in self.data.items()},
            )
        return Variant(self.kind.value, self.data)

    @property
    def native(self) -> Any:
        if self.kind is Kind.DICT:
            return {k: v.native for k, v in self.data.items()}
        return self.data
