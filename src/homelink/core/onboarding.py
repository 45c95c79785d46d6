"""Guided add/edit device conversation.

Every user turn is one call to ``OnboardingFlow.handle(conversation, event)``
which returns the next conversation and the reply to render. Validation
failures never leave the flow: they re-prompt the same step.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Literal, get_args

from homelink.exceptions import NotFoundError, ValidationError
from homelink.models import (
    AddDeviceConversation,
    AddState,
    Conversation,
    Device,
    DeviceManufacturer,
    DeviceType,
    EditDeviceConversation,
    EditState,
    IdleConversation,
)
from homelink.storage import Database
from homelink.utils.mac import is_mac

from .devices import DevicesClient

logger = logging.getLogger(__name__)

NO_MAC = "-"
MAC_EXAMPLE = "12:23:56:9f:aa:bb"

Action = Literal[
    "status",
    "refresh",
    "add_device",
    "back_to_set_name",
    "back_to_set_type",
    "back_to_set_manufacturer",
    "back_to_set_mac",
    "open_device",
    "edit_name",
    "edit_mac",
    "edit_address",
]


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class ChoiceInput:
    value: str


@dataclass(frozen=True)
class Navigate:
    action: Action
    device_id: int | None = None


Event = TextInput | ChoiceInput | Navigate


@dataclass(frozen=True)
class Button:
    label: str
    event: Navigate


@dataclass
class Reply:
    text: str
    buttons: list[list[Button]] = field(default_factory=list)
    choices: list[str] = field(default_factory=list)


BACK_TO_STATUS = Button("Back to devices", Navigate("status"))

BACK_BUTTONS: dict[AddState, Button] = {
    "add_set_type": Button("Back to name", Navigate("back_to_set_name")),
    "add_set_manufacturer": Button("Back to type", Navigate("back_to_set_type")),
    "add_set_mac": Button("Back to type", Navigate("back_to_set_type")),
    "add_set_address": Button("Back to MAC", Navigate("back_to_set_mac")),
}

ADD_STEPS: tuple[AddState, ...] = get_args(AddState)

BACK_ACTIONS: dict[Action, AddState] = {
    "back_to_set_name": "add_set_name",
    "back_to_set_type": "add_set_type",
    "back_to_set_manufacturer": "add_set_manufacturer",
    "back_to_set_mac": "add_set_mac",
}

EDIT_ACTIONS: dict[Action, EditState] = {
    "edit_name": "edit_name",
    "edit_mac": "edit_mac",
    "edit_address": "edit_address",
}

PROMPTS: dict[AddState | EditState, str] = {
    "add_set_name": "Enter the device name",
    "add_set_type": "Choose the device type",
    "add_set_manufacturer": "Choose the manufacturer",
    "add_set_mac": (
        f"Enter the MAC address (example: {MAC_EXAMPLE}) or {NO_MAC} if there is none"
    ),
    "add_set_address": "Enter the device address",
    "edit_name": "Enter the new name",
    "edit_mac": f"Enter the new MAC address or {NO_MAC} to remove it",
    "edit_address": "Enter the new address",
}

TYPE_CHOICES = [t.value for t in DeviceType if t != DeviceType.UNKNOWN]
MANUFACTURER_CHOICES = [
    m.value for m in DeviceManufacturer if m != DeviceManufacturer.UNKNOWN
]


def _add_keyboard(state: AddState) -> list[list[Button]]:
    back = BACK_BUTTONS.get(state)
    return [[back], [BACK_TO_STATUS]] if back else [[BACK_TO_STATUS]]


def _edit_keyboard(device_id: int) -> list[list[Button]]:
    return [
        [Button("Back to device", Navigate("open_device", device_id))],
        [BACK_TO_STATUS],
    ]


def describe_device(device: Device) -> str:
    lines = [
        f"Name: {device.name}",
        f"Type: {device.type.value}",
        f"Manufacturer: {device.manufacturer.value}",
        f"MAC: {device.mac or '-'}",
        f"Address: {device.address or '-'}",
    ]
    if device.mesh_node_id is not None:
        lines.append(f"Mesh node: {device.mesh_node_id}")
    return "\n".join(lines)


class OnboardingFlow:
    def __init__(self, devices: DevicesClient, store: Database | None = None) -> None:
        self._devices = devices
        self._store = store

    async def process(self, user_id: str, event: Event) -> Reply:
        """Run one turn against the stored conversation of ``user_id``."""
        if self._store is None:
            raise RuntimeError("OnboardingFlow.process needs a conversation store")
        conversation = await asyncio.to_thread(self._store.load_conversation, user_id)
        conversation, reply = await self.handle(conversation, event)
        await asyncio.to_thread(self._store.save_conversation, user_id, conversation)
        return reply

    async def handle(
        self, conversation: Conversation, event: Event
    ) -> tuple[Conversation, Reply]:
        logger.debug("Conversation in %s received %s", conversation.state, event)
        if isinstance(event, Navigate):
            return await self._navigate(conversation, event)
        if isinstance(conversation, AddDeviceConversation):
            return await self._handle_add(conversation, event)
        if isinstance(conversation, EditDeviceConversation):
            return await self._handle_edit(conversation, event)
        return await self._status()

    # Screens

    async def _status(self, notice: str | None = None) -> tuple[Conversation, Reply]:
        devices = await self._devices.get_devices()
        text = f"{len(devices)} device(s) registered"
        if notice:
            text = f"{notice}\n\n{text}"
        buttons = [
            [Button(device.name, Navigate("open_device", device.id))]
            for device in devices
        ]
        buttons.append([Button("Add device", Navigate("add_device"))])
        return IdleConversation(), Reply(text, buttons)

    async def _device_view(
        self, device_id: int, notice: str | None = None
    ) -> tuple[Conversation, Reply]:
        try:
            device = await self._devices.get_device(device_id)
        except NotFoundError as exc:
            return await self._status(str(exc))
        text = describe_device(device)
        if notice:
            text = f"{notice}\n\n{text}"
        buttons = [
            [Button("Edit name", Navigate("edit_name", device_id))],
            [Button("Edit MAC", Navigate("edit_mac", device_id))],
            [Button("Edit address", Navigate("edit_address", device_id))],
            [BACK_TO_STATUS],
        ]
        return IdleConversation(), Reply(text, buttons)

    async def _render(self, conversation: Conversation) -> tuple[Conversation, Reply]:
        """Re-send the prompt of the current step."""
        if isinstance(conversation, AddDeviceConversation):
            return self._add_prompt(conversation)
        if isinstance(conversation, EditDeviceConversation):
            return conversation, Reply(
                PROMPTS[conversation.state], _edit_keyboard(conversation.device_id)
            )
        return await self._status()

    def _add_prompt(
        self, conversation: AddDeviceConversation, error: str | None = None
    ) -> tuple[Conversation, Reply]:
        state = conversation.state
        choices: list[str] = []
        if state == "add_set_type":
            choices = TYPE_CHOICES
        elif state == "add_set_manufacturer":
            choices = MANUFACTURER_CHOICES
        text = error or PROMPTS[state]
        return conversation, Reply(text, _add_keyboard(state), choices)

    # Navigation

    async def _navigate(
        self, conversation: Conversation, event: Navigate
    ) -> tuple[Conversation, Reply]:
        action = event.action

        if action == "status":
            return await self._status()

        if action == "refresh":
            return await self._render(conversation)

        if action == "add_device":
            return self._add_prompt(AddDeviceConversation())

        if action in BACK_ACTIONS:
            if not isinstance(conversation, AddDeviceConversation):
                return await self._status()
            target = BACK_ACTIONS[action]
            if ADD_STEPS.index(target) >= ADD_STEPS.index(conversation.state):
                return self._add_prompt(conversation)
            return self._add_prompt(conversation.model_copy(update={"state": target}))

        if event.device_id is None:
            return await self._status()

        if action == "open_device":
            return await self._device_view(event.device_id)

        try:
            device = await self._devices.get_device(event.device_id)
        except NotFoundError as exc:
            return await self._status(str(exc))
        state = EDIT_ACTIONS[action]
        current = {
            "edit_name": device.name,
            "edit_mac": device.mac,
            "edit_address": device.address,
        }[state]
        text = f"{PROMPTS[state]} (current: {current or '-'})"
        return (
            EditDeviceConversation(state=state, device_id=device.id),
            Reply(text, _edit_keyboard(device.id)),
        )

    # Add flow

    async def _handle_add(
        self, conversation: AddDeviceConversation, event: TextInput | ChoiceInput
    ) -> tuple[Conversation, Reply]:
        state = conversation.state
        payload = conversation.payload

        if state in ("add_set_type", "add_set_manufacturer"):
            choices = TYPE_CHOICES if state == "add_set_type" else MANUFACTURER_CHOICES
            if not isinstance(event, ChoiceInput) or event.value not in choices:
                return self._add_prompt(conversation)
            if state == "add_set_type":
                update: dict[str, DeviceType | DeviceManufacturer] = {
                    "type": DeviceType(event.value)
                }
                next_state: AddState = "add_set_manufacturer"
            else:
                update = {"manufacturer": DeviceManufacturer(event.value)}
                next_state = "add_set_mac"
            return self._add_prompt(
                AddDeviceConversation(
                    state=next_state, payload=payload.model_copy(update=update)
                )
            )

        if not isinstance(event, TextInput):
            return self._add_prompt(conversation)

        try:
            if state == "add_set_name":
                name = await self.validate_name(event.text)
                return self._add_prompt(
                    AddDeviceConversation(
                        state="add_set_type",
                        payload=payload.model_copy(update={"name": name}),
                    )
                )

            if state == "add_set_mac":
                mac = await self.validate_mac(event.text)
                return self._add_prompt(
                    AddDeviceConversation(
                        state="add_set_address",
                        payload=payload.model_copy(update={"mac": mac}),
                    )
                )

            address = await self.validate_address(event.text)
        except ValidationError as exc:
            return self._add_prompt(conversation, error=exc.message)

        if not payload.name:
            # a stale back button can skip the name step
            return self._add_prompt(
                AddDeviceConversation(payload=payload),
                error="Device name must contain at least 1 character",
            )

        device = await self._devices.add_device(
            payload.model_copy(update={"address": address})
        )
        reply = Reply(
            "Device added!",
            [[Button("Details", Navigate("open_device", device.id))]],
        )
        return IdleConversation(), reply

    # Edit flow

    async def _handle_edit(
        self, conversation: EditDeviceConversation, event: TextInput | ChoiceInput
    ) -> tuple[Conversation, Reply]:
        device_id = conversation.device_id
        if not isinstance(event, TextInput):
            return await self._render(conversation)

        try:
            if conversation.state == "edit_name":
                name = await self.validate_name(event.text, exclude_id=device_id)
                await self._devices.edit_device(device_id, name=name)
                notice = "Name changed"
            elif conversation.state == "edit_mac":
                mac = await self.validate_mac(event.text, exclude_id=device_id)
                await self._devices.edit_device(device_id, mac=mac)
                notice = "MAC changed" if mac else "MAC removed"
            else:
                address = await self.validate_address(
                    event.text, exclude_id=device_id
                )
                await self._devices.edit_device(device_id, address=address)
                notice = "Address changed"
        except ValidationError as exc:
            return conversation, Reply(exc.message, _edit_keyboard(device_id))
        except NotFoundError as exc:
            return await self._status(str(exc))

        return await self._device_view(device_id, notice)

    # Validators

    async def validate_name(self, text: str, exclude_id: int | None = None) -> str:
        name = text.strip()
        if not name:
            raise ValidationError("Device name must contain at least 1 character")
        if not await self._devices.is_name_allowed(name, exclude_id):
            raise ValidationError("Device name must be unique")
        return name

    async def validate_mac(
        self, text: str, exclude_id: int | None = None
    ) -> str | None:
        """Uppercased MAC, or ``None`` when the user entered ``-``."""
        mac = text.strip().upper()
        if mac == NO_MAC:
            return None
        if not is_mac(mac):
            raise ValidationError(
                f"Enter a valid MAC address (example: {MAC_EXAMPLE})"
            )
        if not await self._devices.is_mac_allowed(mac, exclude_id):
            raise ValidationError("MAC address must be unique")
        return mac

    async def validate_address(self, text: str, exclude_id: int | None = None) -> str:
        address = text.strip()
        if not address:
            raise ValidationError("Device address must contain at least 1 character")
        if not await self._devices.is_address_allowed(address, exclude_id):
            raise ValidationError("Device address must be unique")
        return address
