from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, default_data_dir, expand_path

CONFIG_ENV_VAR = "HOMELINK_CONFIG"


class DatabaseConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    path: str = Field(default_factory=lambda: str(default_data_dir()))


class PresenceConfig(BaseModel):
    """Where the live address/MAC snapshot comes from."""

    model_config = {"frozen": True, "extra": "forbid"}

    source: Literal["arp", "none"] = "arp"
    arp_table: str = "/proc/net/arp"


class MeshConfig(BaseModel):
    """python-matter-server controller; an empty url leaves the mesh unconfigured."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str = ""
    endpoint: int = Field(default=1, ge=0)
    timeout: float = Field(default=10.0, gt=0)


class LightingConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    port: int = Field(default=55443, ge=1, le=65535)
    timeout: float = Field(default=3.0, gt=0)


class WakeConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    broadcast: str = "255.255.255.255"
    port: int = Field(default=9, ge=1, le=65535)


class StateConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=3.0, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    presence: PresenceConfig = Field(default_factory=PresenceConfig)
    mesh: MeshConfig = Field(default_factory=MeshConfig)
    lighting: LightingConfig = Field(default_factory=LightingConfig)
    wake: WakeConfig = Field(default_factory=WakeConfig)
    state: StateConfig = Field(default_factory=StateConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def data_dir_from_settings(settings: Settings) -> Path:
    return expand_path(settings.database.path)


def _toml_string(value: str) -> str:
    return json.dumps(value)


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# homelink configuration",
        "",
        "[database]",
        f"path = {_toml_string(settings.database.path)}",
        "",
        "[presence]",
        f"source = {_toml_string(settings.presence.source)}",
        f"arp_table = {_toml_string(settings.presence.arp_table)}",
        "",
        "[mesh]",
        f"url = {_toml_string(settings.mesh.url)}",
        f"endpoint = {settings.mesh.endpoint}",
        f"timeout = {settings.mesh.timeout}",
        "",
        "[lighting]",
        f"port = {settings.lighting.port}",
        f"timeout = {settings.lighting.timeout}",
        "",
        "[wake]",
        f"broadcast = {_toml_string(settings.wake.broadcast)}",
        f"port = {settings.wake.port}",
        "",
        "[state]",
        f"timeout = {settings.state.timeout}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
