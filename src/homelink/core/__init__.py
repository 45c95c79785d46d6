from __future__ import annotations

from .devices import DevicesClient
from .identity import (
    is_mac,
    match_device_to_presence,
    normalize_mac,
    resolve_address_and_mac,
)
from .onboarding import Button, ChoiceInput, Navigate, OnboardingFlow, Reply, TextInput
from .routing import (
    LightingRoute,
    MeshRoute,
    Route,
    UnsupportedRoute,
    WakeRoute,
    classify_route,
)

__all__ = [
    "Button",
    "ChoiceInput",
    "DevicesClient",
    "LightingRoute",
    "MeshRoute",
    "Navigate",
    "OnboardingFlow",
    "Reply",
    "Route",
    "TextInput",
    "UnsupportedRoute",
    "WakeRoute",
    "classify_route",
    "is_mac",
    "match_device_to_presence",
    "normalize_mac",
    "resolve_address_and_mac",
]
