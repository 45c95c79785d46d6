from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from homelink.models import (
    AddDevicePayload,
    Conversation,
    ConversationRecord,
    Device,
    IdleConversation,
    device_type_for_word,
)

logger = logging.getLogger(__name__)

DEVICES_FILE = "devices.toml"
CONVERSATIONS_FILE = "conversations.json"

# Written in this order; None values are omitted.
DEVICE_FIELDS = (
    "name",
    "type",
    "manufacturer",
    "mac",
    "address",
    "mesh_node_id",
    "created_at",
)


def _toml_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _render_device(device: Device) -> str:
    data = device.model_dump(mode="json")
    fields = []
    for key in DEVICE_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        # node ids can exceed TOML's 64-bit integers
        fields.append(f"{key} = {_toml_string(str(value))}")
    return f'"{device.id}" = {{ {", ".join(fields)} }}'


def _render_devices_toml(devices: dict[int, Device]) -> str:
    lines = [
        "# homelink device registry",
        "# One entry per managed device, keyed by numeric id",
        "",
        "[devices]",
    ]
    lines.extend(_render_device(devices[key]) for key in sorted(devices))
    lines.append("")
    return "\n".join(lines)


class Database:
    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._devices_path = data_dir / DEVICES_FILE
        self._conversations_path = data_dir / CONVERSATIONS_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def devices_path(self) -> Path:
        return self._devices_path

    @property
    def conversations_path(self) -> Path:
        return self._conversations_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)

    # Devices

    def load_devices(self) -> dict[int, Device]:
        if not self._devices_path.exists():
            return {}

        try:
            with self._devices_path.open("rb") as handle:
                data = tomllib.load(handle) or {}
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(
                f"Invalid TOML in devices file: {self._devices_path}\n{exc}"
            ) from exc

        devices: dict[int, Device] = {}
        try:
            for key, fields in data.get("devices", {}).items():
                device_id = int(key)
                devices[device_id] = Device.model_validate({"id": device_id, **fields})
        except (ValueError, ValidationError) as exc:
            raise ValueError(
                f"Invalid devices file: {self._devices_path}\n{exc}"
            ) from exc
        return devices

    def save_devices(self, devices: dict[int, Device]) -> None:
        self.ensure_dirs()
        self._devices_path.write_text(_render_devices_toml(devices))

    def list_devices(self) -> list[Device]:
        devices = self.load_devices()
        return [devices[key] for key in sorted(devices)]

    def get_device(self, device_id: int) -> Device | None:
        return self.load_devices().get(device_id)

    def create_device(
        self, payload: AddDevicePayload, mesh_node_id: int | None = None
    ) -> Device:
        devices = self.load_devices()
        device = Device(
            id=max(devices, default=0) + 1,
            mesh_node_id=mesh_node_id,
            created_at=datetime.now(timezone.utc),
            **payload.model_dump(),
        )
        devices[device.id] = device
        self.save_devices(devices)
        logger.debug("Created device %d (%s)", device.id, device.name)
        return device

    def update_device(self, device_id: int, **fields: Any) -> Device | None:
        devices = self.load_devices()
        current = devices.get(device_id)
        if current is None:
            return None
        updated = Device.model_validate({**current.model_dump(), **fields})
        devices[device_id] = updated
        self.save_devices(devices)
        return updated

    def delete_device(self, device_id: int) -> bool:
        devices = self.load_devices()
        if device_id in devices:
            del devices[device_id]
            self.save_devices(devices)
            return True
        return False

    def _is_free(
        self, exclude_id: int | None, predicate: Callable[[Device], bool]
    ) -> bool:
        return not any(
            predicate(device)
            for device in self.load_devices().values()
            if device.id != exclude_id
        )

    def is_name_allowed(self, name: str, exclude_id: int | None = None) -> bool:
        return self._is_free(exclude_id, lambda device: device.name == name)

    def is_mac_allowed(self, mac: str, exclude_id: int | None = None) -> bool:
        wanted = mac.upper()
        return self._is_free(
            exclude_id,
            lambda device: device.mac is not None and device.mac.upper() == wanted,
        )

    def is_address_allowed(self, address: str, exclude_id: int | None = None) -> bool:
        return self._is_free(exclude_id, lambda device: device.address == address)

    def find_device(self, query: str) -> Device | None:
        """First device whose name contains ``query`` or whose type it names."""
        device_type = device_type_for_word(query)
        needle = query.casefold()
        for device in self.list_devices():
            if needle in device.name.casefold() or device.type == device_type:
                return device
        return None

    # Conversations

    def _load_conversations(self) -> dict[str, Any]:
        if not self._conversations_path.exists():
            return {}
        try:
            with self._conversations_path.open("r") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Invalid conversations file: {self._conversations_path}\n{exc}"
            ) from exc

    def load_conversation(self, user_id: str) -> Conversation:
        data = self._load_conversations().get(user_id)
        if data is None:
            return IdleConversation()
        try:
            record = ConversationRecord.model_validate({"conversation": data})
        except ValidationError:
            logger.warning("Discarding unreadable conversation for user %s", user_id)
            return IdleConversation()
        return record.conversation

    def save_conversation(self, user_id: str, conversation: Conversation) -> None:
        conversations = self._load_conversations()
        conversations[user_id] = conversation.model_dump(mode="json")
        self.ensure_dirs()
        with self._conversations_path.open("w") as handle:
            json.dump(conversations, handle, indent=2, ensure_ascii=False)

    def init(self) -> None:
        self.ensure_dirs()
        if not self._devices_path.exists():
            self.save_devices({})
