from __future__ import annotations

import typer
from rich.console import Console

from homelink.models import Device

from .common import build_client, build_database, load_settings_or_exit, run_or_exit
from .devices import resolve_device


def _switch(device_ref: str, on: bool) -> None:
    settings = load_settings_or_exit()
    client = build_client(settings, build_database(settings))

    async def _run() -> Device:
        device = await resolve_device(client, device_ref)
        if on:
            await client.turn_on(device.id)
        else:
            await client.turn_off(device.id)
        return device

    device = run_or_exit(_run())
    Console().print(
        f"[green]✓[/green] Turned {'on' if on else 'off'} '{device.name}'"
    )


def register(app: typer.Typer) -> None:
    @app.command("on")
    def turn_on(device: str = typer.Argument(..., help="Device id or name")) -> None:
        """Turn a device on (mesh, vendor lighting or wake-on-LAN)."""
        _switch(device, True)

    @app.command("off")
    def turn_off(device: str = typer.Argument(..., help="Device id or name")) -> None:
        """Turn a device off."""
        _switch(device, False)
