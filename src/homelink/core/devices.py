from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from homelink.backends import LightingBackend, MeshBackend, PresenceSource, WakeBackend
from homelink.exceptions import NotFoundError, UnsupportedError
from homelink.models import (
    AddDevicePayload,
    CommissionedNode,
    Device,
    DeviceAddressAndMac,
    DeviceInfo,
    DeviceManufacturer,
    DeviceState,
    DeviceType,
    PowerState,
    PresenceEntry,
)
from homelink.storage import Database

from .identity import match_device_to_presence, resolve_address_and_mac
from .routing import LightingRoute, MeshRoute, Route, WakeRoute, classify_route

logger = logging.getLogger(__name__)

DEFAULT_STATE_TIMEOUT = 3.0


class DevicesClient:
    """Device registry plus power control across mesh, lighting and wake backends.

    Commands (``turn_on``, ``turn_off``, ``commission``, ``delete_device``)
    propagate backend failures. State queries never do: an unreachable
    backend or presence source degrades to ``"unknown"`` / offline.
    """

    def __init__(
        self,
        db: Database,
        presence: PresenceSource,
        mesh: MeshBackend,
        lighting: LightingBackend,
        wake: WakeBackend,
        state_timeout: float = DEFAULT_STATE_TIMEOUT,
    ) -> None:
        self._db = db
        self._presence = presence
        self._mesh = mesh
        self._lighting = lighting
        self._wake = wake
        self._state_timeout = state_timeout

    # Registry

    async def get_device(self, device_id: int) -> Device:
        device = await asyncio.to_thread(self._db.get_device, device_id)
        if device is None:
            raise NotFoundError(details=f"id {device_id}")
        return device

    async def get_devices(self) -> list[Device]:
        return await asyncio.to_thread(self._db.list_devices)

    async def find_device(self, query: str) -> Device:
        device = await asyncio.to_thread(self._db.find_device, query)
        if device is None:
            raise NotFoundError(details=query)
        return device

    async def add_device(
        self, payload: AddDevicePayload, mesh_node_id: int | None = None
    ) -> Device:
        resolved = await self.resolve_address_and_mac(
            DeviceAddressAndMac(address=payload.address, mac=payload.mac)
        )
        updates = await self._free_updates(payload, resolved)
        payload = payload.model_copy(update=updates)
        device = await asyncio.to_thread(self._db.create_device, payload, mesh_node_id)
        logger.info("Added device %d '%s'", device.id, device.name)
        return device

    async def _free_updates(
        self, payload: AddDevicePayload, resolved: DeviceAddressAndMac
    ) -> dict[str, str]:
        """Resolved values that differ from the payload and no other device owns."""
        updates: dict[str, str] = {}
        if resolved.mac is not None and resolved.mac != payload.mac:
            if await self.is_mac_allowed(resolved.mac):
                updates["mac"] = resolved.mac
            else:
                logger.warning("Not adopting MAC %s: already registered", resolved.mac)
        if resolved.address is not None and resolved.address != payload.address:
            if await self.is_address_allowed(resolved.address):
                updates["address"] = resolved.address
            else:
                logger.warning(
                    "Not adopting address %s: already registered", resolved.address
                )
        return updates

    async def edit_device(self, device_id: int, **fields: Any) -> Device:
        device = await asyncio.to_thread(self._db.update_device, device_id, **fields)
        if device is None:
            raise NotFoundError(details=f"id {device_id}")
        logger.info("Edited device %d: %s", device_id, ", ".join(sorted(fields)))
        return device

    async def delete_device(self, device_id: int) -> None:
        device = await self.get_device(device_id)

        # a failed decommission must leave the record in place
        if device.mesh_node_id is not None:
            await self._mesh.decommission(device.mesh_node_id)

        await asyncio.to_thread(self._db.delete_device, device_id)
        logger.info("Deleted device %d '%s'", device_id, device.name)

    async def is_name_allowed(self, name: str, exclude_id: int | None = None) -> bool:
        return await asyncio.to_thread(self._db.is_name_allowed, name, exclude_id)

    async def is_mac_allowed(self, mac: str, exclude_id: int | None = None) -> bool:
        return await asyncio.to_thread(self._db.is_mac_allowed, mac, exclude_id)

    async def is_address_allowed(
        self, address: str, exclude_id: int | None = None
    ) -> bool:
        return await asyncio.to_thread(self._db.is_address_allowed, address, exclude_id)

    # Mesh lifecycle

    async def commission(self, pairing_code: str) -> CommissionedNode:
        node = await self._mesh.commission(pairing_code)
        logger.info("Commissioned mesh node %d", node.node_id)
        return node

    async def decommission(self, node_id: int) -> None:
        await self._mesh.decommission(node_id)
        logger.info("Decommissioned mesh node %d", node_id)

    # Presence

    async def get_presence(self, timeout: float | None = None) -> list[PresenceEntry]:
        """Current presence snapshot; empty if the source is unavailable."""
        try:
            return await asyncio.wait_for(self._presence.fetch(), timeout=timeout)
        except Exception as exc:
            logger.warning("Presence source unavailable: %s", exc)
            return []

    async def resolve_address_and_mac(
        self,
        known: DeviceAddressAndMac | Device,
        snapshot: list[PresenceEntry] | None = None,
    ) -> DeviceAddressAndMac:
        if snapshot is None:
            snapshot = await self.get_presence()
        return resolve_address_and_mac(known, snapshot)

    @staticmethod
    def from_presence_entry(entry: PresenceEntry) -> Device:
        """Unregistered device view of a host seen on the network."""
        return Device(
            id=0,
            name=entry.hostname or entry.address,
            type=DeviceType.UNKNOWN,
            manufacturer=DeviceManufacturer.UNKNOWN,
            mac=entry.mac.upper(),
            address=entry.address,
            created_at=datetime.now(timezone.utc) - timedelta(seconds=entry.uptime),
        )

    # Power

    async def turn_on(self, device_id: int) -> None:
        await self._set_power(device_id, True)

    async def turn_off(self, device_id: int) -> None:
        await self._set_power(device_id, False)

    async def _route(
        self, device: Device, power_on: bool, snapshot: list[PresenceEntry] | None
    ) -> Route:
        resolved = None
        if device.mesh_node_id is None:
            resolved = await self.resolve_address_and_mac(device, snapshot)
        return classify_route(device, resolved, power_on=power_on)

    async def _set_power(self, device_id: int, on: bool) -> None:
        device = await self.get_device(device_id)
        route = await self._route(device, on, None)
        logger.debug(
            "Turning device %d %s via %s", device_id, "on" if on else "off", route
        )

        if isinstance(route, MeshRoute):
            await self._mesh.set_power(route.node_id, on)
        elif isinstance(route, LightingRoute):
            await self._lighting.set_power(route.address, on)
        elif isinstance(route, WakeRoute):
            await self._wake.wake(route.mac, route.address)
        else:
            raise UnsupportedError(details=route.reason)

    # State

    async def get_device_info(
        self,
        device_id: int,
        timeout: float | None = None,
        snapshot: list[PresenceEntry] | None = None,
    ) -> DeviceInfo:
        """Device record plus best-effort online/power state.

        Raises ``NotFoundError`` for an unknown id and nothing else.
        ``snapshot`` lets callers listing many devices share one fetch.
        """
        timeout = timeout or self._state_timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        if snapshot is None:
            device, snapshot = await asyncio.gather(
                self.get_device(device_id), self.get_presence(timeout)
            )
        else:
            device = await self.get_device(device_id)

        entry = match_device_to_presence(device, snapshot)
        route = await self._route(device, True, snapshot)
        power = await self._query_power(route, max(deadline - loop.time(), 0.0))

        return DeviceInfo(
            **device.model_dump(),
            state=DeviceState(online=entry.online if entry else False, power=power),
        )

    async def _query_power(self, route: Route, timeout: float) -> PowerState:
        try:
            if isinstance(route, MeshRoute):
                return await asyncio.wait_for(
                    self._mesh.get_power_state(route.node_id), timeout=timeout
                )
            if isinstance(route, LightingRoute):
                reading = await asyncio.wait_for(
                    self._lighting.get_power_state(route.address, timeout),
                    timeout=timeout,
                )
                if reading is not None:
                    return reading == "on"
        except Exception as exc:
            logger.warning("Power state unavailable via %s: %s", route, exc)
        return "unknown"
