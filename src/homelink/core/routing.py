"""Pick the control backend for a device.

``classify_route`` is the single routing table for power commands and
power queries. It does no I/O; callers resolve the live address/MAC first.
"""

from __future__ import annotations

from dataclasses import dataclass

from homelink.models import Device, DeviceAddressAndMac, DeviceManufacturer, DeviceType


@dataclass(frozen=True)
class MeshRoute:
    node_id: int


@dataclass(frozen=True)
class LightingRoute:
    address: str


@dataclass(frozen=True)
class WakeRoute:
    mac: str
    address: str


@dataclass(frozen=True)
class UnsupportedRoute:
    reason: str


Route = MeshRoute | LightingRoute | WakeRoute | UnsupportedRoute


def classify_route(
    device: Device,
    resolved: DeviceAddressAndMac | None = None,
    *,
    power_on: bool,
) -> Route:
    """Route a power command (or query, with ``power_on=True``) for ``device``.

    Order matters: a mesh binding wins over type and manufacturer, lightbulbs
    only have the vendor lighting backend, and everything else can only be
    woken, never switched off.
    """
    if device.mesh_node_id is not None:
        return MeshRoute(node_id=device.mesh_node_id)

    if resolved is None:
        resolved = DeviceAddressAndMac(address=device.address, mac=device.mac)

    if device.type == DeviceType.LIGHTBULB:
        if device.manufacturer != DeviceManufacturer.YEELIGHT:
            return UnsupportedRoute(
                f"no control backend for {device.manufacturer.value} lightbulbs"
            )
        if not resolved.address:
            return UnsupportedRoute("lightbulb address is unknown")
        return LightingRoute(address=resolved.address)

    if not power_on:
        return UnsupportedRoute(f"{device.type.value} devices can only be woken")

    if not resolved.address or not resolved.mac:
        return UnsupportedRoute("address and MAC are required to wake a device")
    return WakeRoute(mac=resolved.mac, address=resolved.address)
