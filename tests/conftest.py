import sys
from os.path import dirname as d
from os.path import abspath, join, pathsep
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

root_dir = d(d(abspath(__file__)))
env = join(root_dir, ".env")
try:
    with open(env) as f:

        def ispypath(s: str) -> bool:
            return s.startswith("PYTHONPATH")

        pythonpaths = [x[11:].rstrip() for x in f.readlines() if ispypath(x)]
        if pythonpaths:
            pythonpath = pythonpaths[0]
            pythonpath = pythonpath.replace("${env:PROJ_DIR}", root_dir)
            pythonpaths = pythonpath.split(pathsep)
            for p in pythonpaths:
                sys.path.append(p)
except FileNotFoundError:
    # The env file is not to be found, this is a production build.
    pass
sys.path.append(join(root_dir, "src"))


class FakeProxy(object):
    """
    Stands in for a dasbus InterfaceProxy.  Every method call is recorded
    and answered through the dasbus ``callback`` protocol.
    """

    def __init__(self, bus: "FakeBus", service: str, interface: str) -> None:
        self.bus = bus
        self.service = service
        self.interface = interface

    def __getattr__(self, member: str) -> Callable[..., None]:
        def method(
            *args: Any,
            callback: Optional[Callable[..., Any]] = None,
            timeout: Optional[int] = None,
        ) -> None:
            self.bus.calls.append((self.service, self.interface, member, args))
            self.bus.timeouts.append(timeout)
            answer = self.bus.answers.get((self.interface, member))

            def get_result() -> Any:
                if isinstance(answer, BaseException):
                    raise answer
                if callable(answer):
                    return answer(self.service, *args)
                return answer

            assert callback is not None, "calls must be asynchronous"
            callback(get_result)

        return method


class FakeGioConnection(object):
    def __init__(self) -> None:
        self.next_token = 1
        self.subscriptions: Dict[int, Tuple[Any, ...]] = {}
        self.unsubscribed: List[int] = []
        self.failing_unsubscribes: Dict[int, BaseException] = {}
        self.subscribe_error: Optional[BaseException] = None

    def signal_subscribe(
        self,
        sender: Optional[str],
        interface: Optional[str],
        member: str,
        path: str,
        arg0: Optional[str],
        flags: int,
        callback: Callable[..., None],
    ) -> int:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        token = self.next_token
        self.next_token += 1
        self.subscriptions[token] = (sender, interface, member, path, callback)
        return token

    def signal_unsubscribe(self, token: int) -> None:
        self.unsubscribed.append(token)
        if token in self.failing_unsubscribes:
            raise self.failing_unsubscribes[token]
        del self.subscriptions[token]

    def emit(
        self,
        sender: str,
        interface: str,
        member: str,
        path: str,
        parameters: Any,
    ) -> None:
        for want_sender, _, want_member, want_path, callback in list(
            self.subscriptions.values()
        ):
            if want_sender is not None and want_sender != sender:
                continue
            if want_member == member and want_path == path:
                callback(None, sender, path, interface, member, parameters)


class FakeBus(object):
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, str, Tuple[Any, ...]]] = []
        self.timeouts: List[Optional[int]] = []
        self.answers: Dict[Tuple[str, str], Any] = {}
        self.handler_factories: Dict[Tuple[str, str], Any] = {}
        self.connection = FakeGioConnection()

    def get_proxy(
        self,
        service: str,
        object_path: str,
        interface_name: str = "",
        handler_factory: Any = None,
    ) -> FakeProxy:
        self.handler_factories[(service, interface_name)] = handler_factory
        return FakeProxy(self, service, interface_name)

    def calls_to(self, member: str) -> List[Tuple[Any, ...]]:
        return [args for _, _, m, args in self.calls if m == member]


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()
