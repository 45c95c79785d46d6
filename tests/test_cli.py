from __future__ import annotations

import pytest
from typer.testing import CliRunner

from homelink import __version__
from homelink.backends import MatterMeshBackend, UnconfiguredMeshBackend
from homelink.cli import app
from homelink.cli.common import build_mesh_backend
from homelink.config import (
    DatabaseConfig,
    MeshConfig,
    PresenceConfig,
    Settings,
    get_settings,
    load_settings,
    write_settings,
)
from homelink.models import AddDevicePayload, DeviceType
from homelink.storage import Database

runner = CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    data_dir = tmp_path / "data"
    config_path = tmp_path / "config.toml"
    write_settings(
        Settings(
            database=DatabaseConfig(path=str(data_dir)),
            presence=PresenceConfig(source="none"),
        ),
        config_path,
    )
    monkeypatch.setenv("HOMELINK_CONFIG", str(config_path))
    get_settings.cache_clear()
    return data_dir


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"homelink version {__version__}" in result.stdout


def test_list_without_devices(data_dir):
    result = runner.invoke(app, ["devices", "list"])

    assert result.exit_code == 0
    assert "No devices registered." in result.stdout


def test_list_shows_devices(data_dir):
    Database(data_dir).create_device(
        AddDevicePayload(name="Living TV", type=DeviceType.TV, address="192.168.1.10")
    )

    result = runner.invoke(app, ["devices", "list", "--redact"])

    assert result.exit_code == 0
    assert "Living TV" in result.stdout
    assert "x.x.x.10" in result.stdout


def test_turn_off_tv_is_unsupported(data_dir):
    Database(data_dir).create_device(AddDevicePayload(name="TV", type=DeviceType.TV))

    result = runner.invoke(app, ["off", "tv"])

    assert result.exit_code == 1


def test_unknown_device_exits_with_error(data_dir):
    result = runner.invoke(app, ["on", "7"])

    assert result.exit_code == 1


def test_onboard_adds_device(data_dir):
    answers = "\n".join(["Desk", "Socket", "Other", "-", "192.168.1.20"]) + "\n"

    result = runner.invoke(app, ["onboard"], input=answers)

    assert result.exit_code == 0, result.stdout
    assert "Device added!" in result.stdout
    (device,) = Database(data_dir).list_devices()
    assert device.name == "Desk"
    assert device.type == DeviceType.SOCKET


def test_remove_device(data_dir):
    device = Database(data_dir).create_device(AddDevicePayload(name="TV"))

    result = runner.invoke(app, ["devices", "remove", str(device.id)])

    assert result.exit_code == 0
    assert Database(data_dir).list_devices() == []


def test_config_show(data_dir):
    result = runner.invoke(app, ["config", "show"])

    assert result.exit_code == 0
    assert 'source = "none"' in result.stdout


def test_config_show_names_backends(data_dir):
    result = runner.invoke(app, ["config", "show"])

    assert "Mesh controller: not configured" in result.stdout


def test_config_init_with_mesh_url(tmp_path, monkeypatch):
    path = tmp_path / "homelink.toml"
    monkeypatch.setenv("HOMELINK_CONFIG", str(path))

    result = runner.invoke(
        app, ["config", "init", "--mesh-url", "ws://hub.local:5580/ws"]
    )

    assert result.exit_code == 0
    assert load_settings(path).mesh.url == "ws://hub.local:5580/ws"
    assert runner.invoke(app, ["config", "init"]).exit_code == 1


def test_init_creates_registry(data_dir):
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert (data_dir / "devices.toml").exists()
    assert "mesh controller not configured" in result.stdout


def test_mesh_backend_follows_config():
    configured = Settings(mesh=MeshConfig(url="ws://hub.local:5580/ws"))

    assert isinstance(build_mesh_backend(Settings()), UnconfiguredMeshBackend)
    assert isinstance(build_mesh_backend(configured), MatterMeshBackend)
