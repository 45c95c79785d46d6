from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class DeviceType(str, Enum):
    LIGHTBULB = "Lightbulb"
    TV = "Tv"
    SOCKET = "Socket"
    OTHER = "Other"
    UNKNOWN = "Unknown"


class DeviceManufacturer(str, Enum):
    YEELIGHT = "Yeelight"
    OTHER = "Other"
    UNKNOWN = "Unknown"


class Device(BaseModel):
    model_config = {"extra": "forbid"}

    id: int
    name: str
    type: DeviceType = DeviceType.OTHER
    manufacturer: DeviceManufacturer = DeviceManufacturer.OTHER
    mac: str | None = None
    address: str | None = None
    mesh_node_id: int | None = None
    created_at: datetime


PowerState = bool | Literal["unknown"]


class DeviceState(BaseModel):
    model_config = {"extra": "forbid"}

    online: bool = False
    power: PowerState = "unknown"


class DeviceInfo(Device):
    state: DeviceState = Field(default_factory=DeviceState)


class PresenceEntry(BaseModel):
    """One host from a presence snapshot (router leases / neighbour table)."""

    model_config = {"extra": "forbid"}

    address: str
    mac: str
    hostname: str = ""
    online: bool = True
    uptime: float = 0.0  # seconds


class DeviceAddressAndMac(BaseModel):
    model_config = {"extra": "forbid"}

    address: str | None = None
    mac: str | None = None


class AddDevicePayload(BaseModel):
    """Fields accumulated while onboarding a device."""

    model_config = {"extra": "forbid"}

    name: str = ""
    type: DeviceType = DeviceType.OTHER
    manufacturer: DeviceManufacturer = DeviceManufacturer.OTHER
    mac: str | None = None
    address: str | None = None


class CommissionedNode(BaseModel):
    """Descriptor of a freshly commissioned mesh node."""

    model_config = {"extra": "forbid"}

    node_id: int
    metadata: dict[str, str] = Field(default_factory=dict)


# Free-text search vocabulary: words a user may type instead of a device name.
DEVICE_WORDS: dict[DeviceType, tuple[str, ...]] = {
    DeviceType.TV: ("tv", "television", "телевизор", "телек", "телик"),
    DeviceType.LIGHTBULB: (
        "lightbulb",
        "bulb",
        "lamp",
        "light",
        "лампочка",
        "лампочку",
        "лампа",
        "лампу",
    ),
    DeviceType.SOCKET: ("socket", "plug", "outlet", "розетка", "розетку"),
    DeviceType.OTHER: (),
    DeviceType.UNKNOWN: (),
}


def device_type_for_word(word: str) -> DeviceType | None:
    needle = word.strip().lower()
    for device_type, words in DEVICE_WORDS.items():
        if needle in words:
            return device_type
    return None
