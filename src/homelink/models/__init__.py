"""Data models for homelink."""

from homelink.models.conversation import (
    AddDeviceConversation,
    AddState,
    Conversation,
    ConversationRecord,
    EditDeviceConversation,
    EditState,
    IdleConversation,
)
from homelink.models.device import (
    DEVICE_WORDS,
    AddDevicePayload,
    CommissionedNode,
    Device,
    DeviceAddressAndMac,
    DeviceInfo,
    DeviceManufacturer,
    DeviceState,
    DeviceType,
    PowerState,
    PresenceEntry,
    device_type_for_word,
)

__all__ = [
    "DEVICE_WORDS",
    "AddDeviceConversation",
    "AddDevicePayload",
    "AddState",
    "CommissionedNode",
    "Conversation",
    "ConversationRecord",
    "Device",
    "DeviceAddressAndMac",
    "DeviceInfo",
    "DeviceManufacturer",
    "DeviceState",
    "DeviceType",
    "EditDeviceConversation",
    "EditState",
    "IdleConversation",
    "PowerState",
    "PresenceEntry",
    "device_type_for_word",
]
