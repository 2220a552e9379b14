from mpris_remote.errors import (
    ClearCallbacksError,
    InvalidArgument,
    InvalidPlayer,
    MPRISError,
    PropertyNotFound,
    ReadOnlyProperty,
    TransportError,
    TypeMismatch,
    UnknownProperty,
)
from mpris_remote.events import EventManager, EventType, MatchRule, Signal, Subscription
from mpris_remote.player import Player
from mpris_remote.value import Kind, Value

__all__ = [
    "ClearCallbacksError",
    "EventManager",
    "EventType",
    "InvalidArgument",
    "InvalidPlayer",
    "Kind",
    "MatchRule",
    "MPRISError",
    "Player",
    "PropertyNotFound",
    "ReadOnlyProperty",
    "Signal",
    "Subscription",
    "TransportError",
    "TypeMismatch",
    "UnknownProperty",
    "Value",
]
