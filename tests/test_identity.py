from __future__ import annotations

from datetime import datetime, timezone

import pytest

from homelink.core.identity import (
    is_mac,
    match_device_to_presence,
    normalize_mac,
    resolve_address_and_mac,
)
from homelink.models import Device, DeviceAddressAndMac, PresenceEntry

SNAPSHOT = [
    PresenceEntry(address="192.168.1.10", mac="aa:bb:cc:dd:ee:01", hostname="tv"),
    PresenceEntry(address="192.168.1.50", mac="AA:BB:CC:DD:EE:FF", hostname="bulb"),
]


def _device(**fields) -> Device:
    return Device(id=1, name="dev", created_at=datetime.now(timezone.utc), **fields)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("12:23:56:9f:aa:bb", True),
        ("12:23:56:9F:AA:BB", True),
        ("12-23-56-9f-aa-bb", False),
        ("12:23:56:9f:aa", False),
        ("zz:23:56:9f:aa:bb", False),
        ("", False),
    ],
)
def test_is_mac(value, expected):
    assert is_mac(value) is expected


def test_normalize_mac_spellings():
    assert normalize_mac("aa-bb-cc-dd-ee-ff") == "AA:BB:CC:DD:EE:FF"
    assert normalize_mac("aabb.ccdd.eeff") == "AA:BB:CC:DD:EE:FF"
    assert normalize_mac("not-a-mac") == "not-a-mac"


def test_resolve_by_mac_is_case_insensitive_and_uppercases():
    known = DeviceAddressAndMac(address="10.0.0.99", mac="AA:BB:CC:DD:EE:01")

    resolved = resolve_address_and_mac(known, SNAPSHOT)

    assert resolved == DeviceAddressAndMac(
        address="192.168.1.10", mac="AA:BB:CC:DD:EE:01"
    )


def test_resolve_by_address_fills_in_mac():
    known = DeviceAddressAndMac(address="192.168.1.10", mac=None)

    resolved = resolve_address_and_mac(known, SNAPSHOT)

    assert resolved.mac == "AA:BB:CC:DD:EE:01"


def test_resolve_without_match_passes_through():
    known = DeviceAddressAndMac(address="10.0.0.1", mac=None)

    assert resolve_address_and_mac(known, SNAPSHOT) == known
    assert resolve_address_and_mac(known, []) == known


def test_resolve_is_idempotent():
    known = _device(address="192.168.1.50", mac="aa:bb:cc:dd:ee:ff")

    first = resolve_address_and_mac(known, SNAPSHOT)
    second = resolve_address_and_mac(known, SNAPSHOT)

    assert first == second
    assert first.mac == "AA:BB:CC:DD:EE:FF"


def test_resolve_first_matching_entry_wins():
    known = DeviceAddressAndMac(address="192.168.1.50", mac="AA:BB:CC:DD:EE:01")

    resolved = resolve_address_and_mac(known, SNAPSHOT)

    assert resolved.address == "192.168.1.10"


def test_match_device_to_presence():
    assert (
        match_device_to_presence(_device(address="192.168.1.50"), SNAPSHOT)
        is SNAPSHOT[1]
    )
    assert (
        match_device_to_presence(_device(mac="AA:BB:CC:DD:EE:FF"), SNAPSHOT)
        is SNAPSHOT[1]
    )
    assert match_device_to_presence(_device(address="10.0.0.1"), SNAPSHOT) is None
    assert match_device_to_presence(_device(), SNAPSHOT) is None
