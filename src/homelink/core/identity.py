"""Reconcile stored device identity with a live presence snapshot."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from homelink.models import Device, DeviceAddressAndMac, PresenceEntry
from homelink.utils.mac import is_mac, normalize_mac

__all__ = [
    "is_mac",
    "match_device_to_presence",
    "normalize_mac",
    "resolve_address_and_mac",
]

logger = logging.getLogger(__name__)


def match_device_to_presence(
    device: Device, snapshot: Iterable[PresenceEntry]
) -> PresenceEntry | None:
    """First snapshot entry sharing the device's address or exact MAC."""
    for entry in snapshot:
        if device.address == entry.address or device.mac == entry.mac:
            return entry
    return None


def resolve_address_and_mac(
    known: DeviceAddressAndMac | Device, snapshot: Iterable[PresenceEntry]
) -> DeviceAddressAndMac:
    """Current address/MAC for a device, falling back to what is stored."""
    known_mac = known.mac.upper() if known.mac else None
    for entry in snapshot:
        if entry.mac.upper() == known_mac or entry.address == known.address:
            logger.debug(
                "Resolved %s/%s to %s/%s",
                known.address,
                known.mac,
                entry.address,
                entry.mac.upper(),
            )
            return DeviceAddressAndMac(address=entry.address, mac=entry.mac.upper())

    return DeviceAddressAndMac(address=known.address, mac=known.mac)
