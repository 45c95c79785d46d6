from __future__ import annotations

import os
from pathlib import Path

APP_NAME = "homelink"
CONFIG_FILENAME = "config.toml"
DATA_DIR_ENV_VAR = "HOMELINK_DATA_DIR"


def _xdg_dir(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    return Path(value) if value else fallback


def default_config_path() -> Path:
    config_home = _xdg_dir("XDG_CONFIG_HOME", Path.home() / ".config")
    return config_home / APP_NAME / CONFIG_FILENAME


def default_data_dir() -> Path:
    override = os.environ.get(DATA_DIR_ENV_VAR)
    if override:
        return expand_path(override)
    data_home = _xdg_dir("XDG_DATA_HOME", Path.home() / ".local" / "share")
    return data_home / APP_NAME


def expand_path(value: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(value)))
