"""Yeelight LAN control through the ``yeelight`` library."""

from __future__ import annotations

import asyncio
import logging

from yeelight import Bulb, BulbException

from homelink.exceptions import BackendError

from .base import LightingPower

logger = logging.getLogger(__name__)

DEFAULT_PORT = 55443
DEFAULT_TIMEOUT = 3.0
TRANSITION_MS = 500


class YeelightClient:
    def __init__(self, port: int = DEFAULT_PORT, timeout: float = DEFAULT_TIMEOUT):
        self._port = port
        self._timeout = timeout

    def _bulb(self, address: str) -> Bulb:
        return Bulb(address, port=self._port, effect="smooth", duration=TRANSITION_MS)

    async def get_power_state(
        self, address: str, timeout: float | None = None
    ) -> LightingPower | None:
        bulb = self._bulb(address)
        try:
            properties = await asyncio.wait_for(
                asyncio.to_thread(bulb.get_properties, requested_properties=["power"]),
                timeout=timeout or self._timeout,
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.debug("No response from bulb at %s (timeout)", address)
            return None
        except (BulbException, OSError) as exc:
            logger.debug("Failed to query bulb at %s: %s", address, exc)
            return None

        power = (properties or {}).get("power")
        if power in ("on", "off"):
            return power
        return None

    async def set_power(self, address: str, on: bool) -> None:
        bulb = self._bulb(address)
        switch = bulb.turn_on if on else bulb.turn_off
        try:
            await asyncio.wait_for(asyncio.to_thread(switch), timeout=self._timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise BackendError("lighting", f"{address} timed out") from exc
        except (BulbException, OSError) as exc:
            raise BackendError("lighting", f"{address}: {exc}") from exc
        logger.debug("Bulb at %s switched %s", address, "on" if on else "off")
