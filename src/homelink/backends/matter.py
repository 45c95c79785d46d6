"""Mesh port backed by a python-matter-server controller.

Each call opens its own WebSocket session, waits for the server to send its
node list, runs one command and disconnects.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp
from chip.clusters import Objects as Clusters
from matter_server.client import MatterClient
from matter_server.client.exceptions import MatterClientException
from matter_server.common.errors import MatterError

from homelink.exceptions import BackendError
from homelink.models import CommissionedNode

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = 1
DEFAULT_TIMEOUT = 10.0

MATTER_ERRORS = (
    MatterClientException,
    MatterError,
    aiohttp.ClientError,
    OSError,
    asyncio.TimeoutError,
)


class MatterMeshBackend:
    def __init__(
        self,
        url: str,
        endpoint: int = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._url = url
        self._endpoint = endpoint
        self._timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[MatterClient]:
        async with aiohttp.ClientSession() as http:
            client = MatterClient(self._url, http)
            await asyncio.wait_for(client.connect(), self._timeout)

            init_ready = asyncio.Event()
            listener = asyncio.create_task(client.start_listening(init_ready))
            ready = asyncio.create_task(init_ready.wait())
            try:
                done, _ = await asyncio.wait(
                    {listener, ready},
                    timeout=self._timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if listener in done:
                    listener.result()
                    raise BackendError("mesh", "controller closed the connection")
                if ready not in done:
                    raise BackendError("mesh", f"no node list from {self._url}")
                yield client
            finally:
                ready.cancel()
                listener.cancel()
                await asyncio.gather(listener, ready, return_exceptions=True)
                await client.disconnect()

    async def commission(self, pairing_code: str) -> CommissionedNode:
        try:
            async with self._session() as client:
                node = await client.commission_with_code(pairing_code)
        except MATTER_ERRORS as exc:
            raise BackendError("mesh", f"commissioning failed: {exc}") from exc

        logger.debug("Controller commissioned node %d", node.node_id)
        return CommissionedNode(
            node_id=node.node_id,
            metadata={
                "available": str(node.available),
                "is_bridge": str(node.is_bridge),
            },
        )

    async def decommission(self, node_id: int) -> None:
        try:
            async with self._session() as client:
                await client.remove_node(node_id)
        except MATTER_ERRORS as exc:
            raise BackendError("mesh", f"removing node {node_id}: {exc}") from exc

    async def get_power_state(self, node_id: int) -> bool:
        try:
            async with self._session() as client:
                node = client.get_node(node_id)
                value = node.get_attribute_value(
                    self._endpoint, Clusters.OnOff, Clusters.OnOff.Attributes.OnOff
                )
        except MATTER_ERRORS as exc:
            raise BackendError("mesh", f"reading node {node_id}: {exc}") from exc

        if value is None:
            raise BackendError("mesh", f"node {node_id} reports no on/off state")
        return bool(value)

    async def set_power(self, node_id: int, on: bool) -> None:
        command = Clusters.OnOff.Commands.On() if on else Clusters.OnOff.Commands.Off()
        try:
            async with self._session() as client:
                await client.send_device_command(
                    node_id=node_id, endpoint_id=self._endpoint, command=command
                )
        except MATTER_ERRORS as exc:
            raise BackendError("mesh", f"switching node {node_id}: {exc}") from exc
