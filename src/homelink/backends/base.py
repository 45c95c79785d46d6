"""Ports for the collaborators the device core talks to.

Concrete adapters live next to this module; tests substitute fakes.
"""

from __future__ import annotations

from typing import Literal, Protocol

from homelink.models import CommissionedNode, PresenceEntry

LightingPower = Literal["on", "off"]


class PresenceSource(Protocol):
    async def fetch(self) -> list[PresenceEntry]: ...


class MeshBackend(Protocol):
    async def commission(self, pairing_code: str) -> CommissionedNode: ...

    async def decommission(self, node_id: int) -> None: ...

    async def get_power_state(self, node_id: int) -> bool: ...

    async def set_power(self, node_id: int, on: bool) -> None: ...


class LightingBackend(Protocol):
    async def get_power_state(
        self, address: str, timeout: float | None = None
    ) -> LightingPower | None: ...

    async def set_power(self, address: str, on: bool) -> None: ...


class WakeBackend(Protocol):
    async def wake(self, mac: str, address: str) -> None: ...
