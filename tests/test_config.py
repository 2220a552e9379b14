import json
import os

import pytest

from mpris_remote import config


def test_defaults_without_file(tmp_path: str) -> None:
    settings = config.load(str(tmp_path), environ={})
    assert settings == config.Settings("session", 5000)


def test_file_and_environment(tmp_path: str) -> None:
    with open(os.path.join(str(tmp_path), "settings.json"), "w") as f:
        json.dump({"bus": "system", "timeout_ms": 1000}, f)
    assert config.load(str(tmp_path), environ={}) == config.Settings("system", 1000)
    settings = config.load(
        str(tmp_path),
        environ={"MPRIS_REMOTE_BUS": "session", "MPRIS_REMOTE_TIMEOUT_MS": "250"},
    )
    assert settings == config.Settings("session", 250)


@pytest.mark.parametrize(
    "data",
    [[], {"bus": "tcp"}, {"timeout_ms": 0}, {"timeout_ms": "5"}, {"colour": 1}],
)
def test_invalid_settings(tmp_path: str, data: object) -> None:
    with open(os.path.join(str(tmp_path), "settings.json"), "w") as f:
        json.dump(data, f)
    with pytest.raises(ValueError):
        config.load(str(tmp_path), environ={})


def test_invalid_timeout_environment(tmp_path: str) -> None:
    with pytest.raises(ValueError):
        config.load(str(tmp_path), environ={"MPRIS_REMOTE_TIMEOUT_MS": "soon"})


def test_folder_is_under_xdg_config_home() -> None:
    assert config.folder().endswith("mpris-remote")
