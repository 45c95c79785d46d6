from __future__ import annotations

from enum import Enum

import typer
from rich.console import Console

from homelink.core import ChoiceInput, Navigate, OnboardingFlow, Reply, TextInput
from homelink.core.onboarding import Event
from homelink.models import IdleConversation

from .common import build_client, build_database, load_settings_or_exit, run_or_exit

CLI_USER = "cli"


class EditField(str, Enum):
    NAME = "name"
    MAC = "mac"
    ADDRESS = "address"


def _render(console: Console, reply: Reply) -> list[Navigate]:
    console.print(reply.text)
    if reply.choices:
        console.print("Options: " + ", ".join(reply.choices))
    targets = [button.event for row in reply.buttons for button in row]
    labels = [button.label for row in reply.buttons for button in row]
    for index, label in enumerate(labels, start=1):
        console.print(f"  [cyan][{index}][/cyan] {label}")
    return targets


def _event_from_input(text: str, reply: Reply, targets: list[Navigate]) -> Event:
    stripped = text.strip()
    if stripped.startswith("[") and stripped.endswith("]"):
        index = stripped[1:-1]
        if index.isdigit() and 1 <= int(index) <= len(targets):
            return targets[int(index) - 1]
    for choice in reply.choices:
        if stripped.lower() == choice.lower():
            return ChoiceInput(choice)
    return TextInput(text)


def _converse(first: Event) -> None:
    """Drive the onboarding conversation until it returns to idle."""
    console = Console()
    settings = load_settings_or_exit()
    db = build_database(settings)
    flow = OnboardingFlow(build_client(settings, db), store=db)

    event = first
    while True:
        reply = run_or_exit(flow.process(CLI_USER, event))
        targets = _render(console, reply)
        if isinstance(db.load_conversation(CLI_USER), IdleConversation):
            return
        answer = typer.prompt(">", default="", show_default=False)
        event = _event_from_input(answer, reply, targets)


def register(app: typer.Typer) -> None:
    @app.command()
    def onboard(
        resume: bool = typer.Option(
            False, "--resume", help="Continue an interrupted onboarding"
        ),
    ) -> None:
        """Add a device step by step. Type [N] to press a button."""
        _converse(Navigate("refresh") if resume else Navigate("add_device"))

    @app.command()
    def edit(
        device_id: int = typer.Argument(..., help="Device id"),
        field: EditField = typer.Argument(..., help="Field to change"),
    ) -> None:
        """Change the name, MAC or address of a device."""
        _converse(Navigate(f"edit_{field.value}", device_id))  # type: ignore[arg-type]
