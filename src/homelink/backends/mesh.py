from __future__ import annotations

from homelink.exceptions import BackendError
from homelink.models import CommissionedNode


class UnconfiguredMeshBackend:
    """Mesh port used when no mesh controller is wired in."""

    def _fail(self) -> BackendError:
        return BackendError("mesh", "no mesh controller configured (set [mesh] url)")

    async def commission(self, pairing_code: str) -> CommissionedNode:
        raise self._fail()

    async def decommission(self, node_id: int) -> None:
        raise self._fail()

    async def get_power_state(self, node_id: int) -> bool:
        raise self._fail()

    async def set_power(self, node_id: int, on: bool) -> None:
        raise self._fail()
