"""Per-user onboarding conversation state.

A conversation is one of three shapes keyed by ``state``; the stored JSON
blob is validated back into the right shape through the discriminator.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from .device import AddDevicePayload

AddState = Literal[
    "add_set_name",
    "add_set_type",
    "add_set_manufacturer",
    "add_set_mac",
    "add_set_address",
]

EditState = Literal["edit_name", "edit_mac", "edit_address"]


class IdleConversation(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    state: Literal["idle"] = "idle"


class AddDeviceConversation(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    state: AddState = "add_set_name"
    payload: AddDevicePayload = Field(default_factory=AddDevicePayload)


class EditDeviceConversation(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    state: EditState
    device_id: int


Conversation = Annotated[
    IdleConversation | AddDeviceConversation | EditDeviceConversation,
    Field(discriminator="state"),
]


class ConversationRecord(BaseModel):
    """Wrapper used to (de)serialize a single conversation."""

    model_config = {"extra": "forbid"}

    conversation: Conversation = Field(default_factory=IdleConversation)
