from __future__ import annotations

from .base import (
    LightingBackend,
    LightingPower,
    MeshBackend,
    PresenceSource,
    WakeBackend,
)
from .matter import MatterMeshBackend
from .mesh import UnconfiguredMeshBackend
from .presence import ArpTablePresenceSource, NullPresenceSource
from .wol import WakeOnLanClient, build_magic_packet
from .yeelight import YeelightClient

__all__ = [
    "ArpTablePresenceSource",
    "LightingBackend",
    "LightingPower",
    "MatterMeshBackend",
    "MeshBackend",
    "NullPresenceSource",
    "PresenceSource",
    "UnconfiguredMeshBackend",
    "WakeBackend",
    "WakeOnLanClient",
    "YeelightClient",
    "build_magic_packet",
]
