"""Presence snapshot sources."""

from __future__ import annotations

import asyncio
import logging
import socket
from pathlib import Path

from homelink.exceptions import BackendError
from homelink.models import PresenceEntry
from homelink.utils.mac import normalize_mac

logger = logging.getLogger(__name__)

ATF_COMPLETE = 0x2
EMPTY_MAC = "00:00:00:00:00:00"


def _resolve_hostname(address: str) -> str:
    try:
        return socket.gethostbyaddr(address)[0]
    except (socket.herror, socket.gaierror, OSError):
        return ""


def parse_arp_table(text: str) -> list[tuple[str, str, bool]]:
    """Parse ``/proc/net/arp`` into ``(address, mac, complete)`` rows."""
    rows: list[tuple[str, str, bool]] = []
    for line in text.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 4:
            continue
        address, _hw_type, flags, mac = fields[:4]
        mac = normalize_mac(mac)
        if mac == EMPTY_MAC:
            continue
        try:
            complete = bool(int(flags, 16) & ATF_COMPLETE)
        except ValueError:
            complete = False
        rows.append((address, mac, complete))
    return rows


class ArpTablePresenceSource:
    """Snapshot built from the kernel neighbour table."""

    def __init__(self, path: Path, resolve_hostnames: bool = True) -> None:
        self._path = path
        self._resolve_hostnames = resolve_hostnames

    def _read(self) -> list[PresenceEntry]:
        try:
            text = self._path.read_text()
        except OSError as exc:
            raise BackendError("presence", f"cannot read {self._path}: {exc}") from exc

        entries = []
        for address, mac, complete in parse_arp_table(text):
            hostname = _resolve_hostname(address) if self._resolve_hostnames else ""
            entries.append(
                PresenceEntry(
                    address=address, mac=mac, hostname=hostname, online=complete
                )
            )
        return entries

    async def fetch(self) -> list[PresenceEntry]:
        entries = await asyncio.to_thread(self._read)
        logger.debug("Read %d presence entries from %s", len(entries), self._path)
        return entries


class NullPresenceSource:
    async def fetch(self) -> list[PresenceEntry]:
        return []
