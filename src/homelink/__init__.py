"""homelink - one identity for smart-home devices reached over many protocols."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .core import DevicesClient, OnboardingFlow
from .exceptions import (
    BackendError,
    HomelinkError,
    NotFoundError,
    UnsupportedError,
    ValidationError,
)
from .models import Device, DeviceInfo, DeviceState, PresenceEntry
from .storage import Database

__all__ = [
    "BackendError",
    "Database",
    "Device",
    "DeviceInfo",
    "DeviceState",
    "DevicesClient",
    "HomelinkError",
    "NotFoundError",
    "OnboardingFlow",
    "PresenceEntry",
    "Settings",
    "UnsupportedError",
    "ValidationError",
    "__version__",
    "get_settings",
]

__version__ = version("homelink")
