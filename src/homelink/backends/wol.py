"""Wake-on-LAN magic packets."""

from __future__ import annotations

import asyncio
import logging
import socket

from homelink.exceptions import BackendError
from homelink.utils.mac import normalize_mac

logger = logging.getLogger(__name__)

DEFAULT_BROADCAST = "255.255.255.255"
DEFAULT_PORT = 9


def build_magic_packet(mac: str) -> bytes:
    normalized = normalize_mac(mac)
    try:
        payload = bytes.fromhex(normalized.replace(":", ""))
    except ValueError as exc:
        raise ValueError(f"Invalid MAC address: {mac}") from exc
    if len(payload) != 6:
        raise ValueError(f"Invalid MAC address: {mac}")
    return b"\xff" * 6 + payload * 16


class WakeOnLanClient:
    def __init__(
        self, broadcast: str = DEFAULT_BROADCAST, port: int = DEFAULT_PORT
    ) -> None:
        self._broadcast = broadcast
        self._port = port

    def _send(self, packet: bytes, targets: list[str]) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            for target in targets:
                sock.sendto(packet, (target, self._port))

    async def wake(self, mac: str, address: str) -> None:
        packet = build_magic_packet(mac)
        # directed copy reaches hosts whose ARP entry is still cached upstream
        targets = [self._broadcast, address]
        try:
            await asyncio.to_thread(self._send, packet, targets)
        except OSError as exc:
            raise BackendError("wake", f"{mac}: {exc}") from exc
        logger.debug("Sent magic packet for %s via %s", mac, ", ".join(targets))
