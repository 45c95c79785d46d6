from __future__ import annotations

import asyncio
import time

import pytest

from homelink.exceptions import NotFoundError
from homelink.models import (
    AddDevicePayload,
    DeviceManufacturer,
    DeviceState,
    DeviceType,
    PresenceEntry,
)


@pytest.fixture
def lamp(db):
    return db.create_device(
        AddDevicePayload(
            name="Lamp",
            type=DeviceType.LIGHTBULB,
            manufacturer=DeviceManufacturer.YEELIGHT,
            address="192.168.1.50",
        )
    )


@pytest.mark.parametrize(("reading", "power"), [("on", True), ("off", False)])
def test_yeelight_power_reading(client, lamp, presence, lighting, reading, power):
    presence.entries = [PresenceEntry(address="192.168.1.50", mac="AA:BB:CC:DD:EE:FF")]
    lighting.readings["192.168.1.50"] = reading

    info = asyncio.run(client.get_device_info(lamp.id))

    assert info.state == DeviceState(online=True, power=power)
    assert info.name == "Lamp"


def test_yeelight_without_reading_is_unknown(client, lamp):
    info = asyncio.run(client.get_device_info(lamp.id))

    assert info.state == DeviceState(online=False, power="unknown")


def test_slow_bulb_degrades_to_unknown_within_timeout(client, lamp, lighting):
    lighting.readings["192.168.1.50"] = "on"
    lighting.delay = 5.0

    started = time.monotonic()
    info = asyncio.run(client.get_device_info(lamp.id, timeout=0.1))

    assert info.state.power == "unknown"
    assert time.monotonic() - started < 2.0


def test_presence_failure_reports_offline(client, lamp, presence, lighting):
    presence.fail = True
    lighting.readings["192.168.1.50"] = "on"

    info = asyncio.run(client.get_device_info(lamp.id))

    assert info.state == DeviceState(online=False, power=True)


def test_offline_presence_entry(client, lamp, presence):
    presence.entries = [
        PresenceEntry(address="192.168.1.50", mac="AA:BB:CC:DD:EE:FF", online=False)
    ]

    info = asyncio.run(client.get_device_info(lamp.id))

    assert info.state.online is False


def test_mesh_power_state(client, db, mesh):
    device = db.create_device(
        AddDevicePayload(name="Plug", type=DeviceType.SOCKET), mesh_node_id=7
    )
    mesh.power[7] = True

    info = asyncio.run(client.get_device_info(device.id))

    assert info.state.power is True


def test_unreachable_mesh_is_unknown(client, db, mesh):
    device = db.create_device(
        AddDevicePayload(name="Plug", type=DeviceType.SOCKET), mesh_node_id=7
    )
    mesh.fail = True

    info = asyncio.run(client.get_device_info(device.id))

    assert info.state.power == "unknown"


def test_devices_without_backend_stay_unknown(client, db, presence):
    tv = db.create_device(
        AddDevicePayload(
            name="TV",
            type=DeviceType.TV,
            address="192.168.1.10",
            mac="AA:BB:CC:DD:EE:01",
        )
    )
    presence.entries = [PresenceEntry(address="192.168.1.10", mac="AA:BB:CC:DD:EE:01")]

    info = asyncio.run(client.get_device_info(tv.id))

    assert info.state == DeviceState(online=True, power="unknown")


def test_shared_snapshot_skips_presence_fetch(client, lamp, presence):
    snapshot = [PresenceEntry(address="192.168.1.50", mac="AA:BB:CC:DD:EE:FF")]

    info = asyncio.run(client.get_device_info(lamp.id, snapshot=snapshot))

    assert info.state.online is True
    assert presence.calls == 0


def test_missing_device_is_not_found(client):
    with pytest.raises(NotFoundError):
        asyncio.run(client.get_device_info(404))


def test_unexpected_mesh_error_reads_as_unknown(client, db, mesh, monkeypatch):
    plug = db.create_device(AddDevicePayload(name="Plug"), mesh_node_id=7)

    async def _closed(node_id):
        raise RuntimeError("controller websocket closed")

    monkeypatch.setattr(mesh, "get_power_state", _closed)

    info = asyncio.run(client.get_device_info(plug.id))

    assert info.state.power == "unknown"
