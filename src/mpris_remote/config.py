import json
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

import xdg.BaseDirectory

from mpris_remote.const import DEFAULT_TIMEOUT_MS


BUS_SESSION = "session"
BUS_SYSTEM = "system"

ENV_BUS = "MPRIS_REMOTE_BUS"
ENV_TIMEOUT_MS = "MPRIS_REMOTE_TIMEOUT_MS"


def folder() -> str:
    return os.path.join(
        xdg.BaseDirectory.xdg_config_home,
        "mpris-remote",
    )


def settings_path(folder_: Optional[str] = None) -> str:
    return os.path.join(
        folder_ if folder_ is not None else folder(),
        "settings.json",
    )


@dataclass
class Settings(object):
    bus: str = BUS_SESSION
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.bus not in (BUS_SESSION, BUS_SYSTEM):
            raise ValueError("bus must be %s or %s" % (BUS_SESSION, BUS_SYSTEM))
        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int):
            raise ValueError("timeout_ms must be an integer")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")


def load(
    folder_: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Reads settings.json from the configuration folder, then applies the
    environment overrides.  A missing file means default settings.
    """
    if environ is None:
        environ = os.environ
    data: Any = {}
    try:
        with open(settings_path(folder_)) as f:
            data = json.load(f)
    except FileNotFoundError:
        pass
    if not isinstance(data, dict):
        raise ValueError("%s must hold a JSON object" % settings_path(folder_))

    known = set(f.name for f in fields(Settings))
    unknown = set(data) - known
    if unknown:
        raise ValueError("Unknown settings: %s" % ", ".join(sorted(unknown)))

    values: Dict[str, Any] = dict(data)
    if environ.get(ENV_BUS):
        values["bus"] = environ[ENV_BUS]
    if environ.get(ENV_TIMEOUT_MS):
        try:
            values["timeout_ms"] = int(environ[ENV_TIMEOUT_MS])
        except ValueError:
            raise ValueError(
                "%s must be an integer, not %r"
                % (ENV_TIMEOUT_MS, environ[ENV_TIMEOUT_MS])
            ) from None
    return Settings(**values)
