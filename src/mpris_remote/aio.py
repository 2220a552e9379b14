"""
Awaitable D-Bus calls.

dasbus proxies accept a ``callback`` keyword that turns a method call into
an asynchronous one: the callback runs from the GLib main loop with a
``call`` function that returns the reply or raises the remote error.  The
helpers here hand that reply to an asyncio future, so they work whether
the GLib loop runs on its own thread or is driven by the asyncio loop.
"""

import asyncio
import logging
from typing import Any, Callable

from dasbus.error import DBusError

import gi

gi.require_version("GLib", "2.0")
from gi.repository import GLib  # noqa: E402

from mpris_remote.const import DEFAULT_TIMEOUT_MS  # noqa: E402
from mpris_remote.errors import TransportError, TypeMismatch  # noqa: E402


_LOGGER = logging.getLogger(__name__)


def _set_result(future: "asyncio.Future[Any]", result: Any) -> None:
    if not future.done():
        future.set_result(result)


def _set_exception(future: "asyncio.Future[Any]", exc: BaseException) -> None:
    if not future.done():
        future.set_exception(exc)


async def call(
    proxy: Any,
    member: str,
    *args: Any,
    timeout: int = DEFAULT_TIMEOUT_MS,
) -> Any:
    """
    Calls method ``member`` of ``proxy`` and waits for the reply.

    Any D-Bus or GLib failure, at call time or in the reply, and a call
    that times out, is raised as TransportError.  Arguments that cannot be
    packed for the wire raise TypeMismatch.
    """
    loop = asyncio.get_running_loop()
    future: "asyncio.Future[Any]" = loop.create_future()

    def reply(get_result: Callable[[], Any]) -> None:
        try:
            result = get_result()
        except (DBusError, GLib.Error, TimeoutError) as e:
            _LOGGER.debug("%s failed: %s", member, e)
            err = TransportError.from_exception(member, e)
            loop.call_soon_threadsafe(_set_exception, future, err)
            return
        except Exception as e:
            _LOGGER.exception("Unexpected reply to %s", member)
            loop.call_soon_threadsafe(_set_exception, future, e)
            return
        loop.call_soon_threadsafe(_set_result, future, result)

    _LOGGER.debug("Calling %s%r", member, args)
    try:
        getattr(proxy, member)(*args, callback=reply, timeout=timeout)
    except (DBusError, GLib.Error) as e:
        raise TransportError.from_exception(member, e) from e
    except (TypeError, OverflowError) as e:
        raise TypeMismatch("Cannot send %r to %s: %s" % (args, member, e)) from e
    return await future
