from __future__ import annotations

import asyncio
import typer
from rich.console import Console
from rich.table import Table

from homelink.core import DevicesClient, match_device_to_presence
from homelink.core.onboarding import describe_device
from homelink.exceptions import ValidationError
from homelink.models import (
    AddDevicePayload,
    Device,
    DeviceInfo,
    DeviceManufacturer,
    DeviceType,
    PowerState,
    PresenceEntry,
)
from homelink.utils.redaction import Redactor

from .common import build_client, build_database, load_settings_or_exit, run_or_exit

app = typer.Typer(no_args_is_help=True, help="Manage registered devices")


def _client() -> DevicesClient:
    settings = load_settings_or_exit()
    return build_client(settings, build_database(settings))


def _format_power(power: PowerState) -> str:
    if power == "unknown":
        return "[dim]unknown[/dim]"
    return "[green]on[/green]" if power else "off"


def _format_online(online: bool) -> str:
    return "[green]yes[/green]" if online else "[red]no[/red]"


async def resolve_device(client: DevicesClient, ref: str) -> Device:
    """Look a device up by numeric id, falling back to free-text search."""
    if ref.isdigit():
        return await client.get_device(int(ref))
    return await client.find_device(ref)


async def _collect_infos(client: DevicesClient) -> list[DeviceInfo]:
    devices, snapshot = await asyncio.gather(
        client.get_devices(), client.get_presence()
    )
    return list(
        await asyncio.gather(
            *(
                client.get_device_info(device.id, snapshot=snapshot)
                for device in devices
            )
        )
    )


@app.command("list")
def list_devices(
    redact: bool = typer.Option(False, "--redact", help="Mask addresses and MACs"),
) -> None:
    """List registered devices with their live state."""
    infos = run_or_exit(_collect_infos(_client()))
    console = Console()

    if not infos:
        console.print("No devices registered.")
        console.print("Use 'homelink onboard' to add one.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Manufacturer")
    table.add_column("Address", style="green")
    table.add_column("MAC")
    table.add_column("Online")
    table.add_column("Power")

    for info in infos:
        table.add_row(
            str(info.id),
            info.name,
            info.type.value,
            info.manufacturer.value,
            redactor.redact_address(info.address),
            redactor.redact_mac(info.mac),
            _format_online(info.state.online),
            _format_power(info.state.power),
        )

    console.print(table)


@app.command("show")
def show_device(device: str = typer.Argument(..., help="Device id or name")) -> None:
    """Show one device and its live state."""
    client = _client()

    async def _info() -> DeviceInfo:
        found = await resolve_device(client, device)
        return await client.get_device_info(found.id)

    info = run_or_exit(_info())
    console = Console()
    console.print(f"[bold]#{info.id}[/bold]")
    console.print(describe_device(info))
    console.print(f"Online: {_format_online(info.state.online)}")
    console.print(f"Power: {_format_power(info.state.power)}")


@app.command("find")
def find_device(
    query: str = typer.Argument(..., help="Name fragment or type word"),
) -> None:
    """Find a device by name fragment or type word ("lamp", "tv", ...)."""
    found = run_or_exit(_client().find_device(query))
    Console().print(f"#{found.id} {found.name} ({found.type.value})")


@app.command("remove")
def remove_device(device: str = typer.Argument(..., help="Device id or name")) -> None:
    """Remove a device, decommissioning its mesh node first."""
    client = _client()

    async def _remove() -> Device:
        found = await resolve_device(client, device)
        await client.delete_device(found.id)
        return found

    removed = run_or_exit(_remove())
    Console().print(f"[green]✓[/green] Removed device '{removed.name}'")


@app.command("presence")
def presence(
    redact: bool = typer.Option(False, "--redact", help="Mask addresses and MACs"),
) -> None:
    """List hosts currently visible on the network."""
    client = _client()

    async def _snapshot() -> tuple[list[PresenceEntry], list[Device]]:
        snapshot, devices = await asyncio.gather(
            client.get_presence(), client.get_devices()
        )
        return snapshot, devices

    snapshot, devices = run_or_exit(_snapshot())
    console = Console()

    if not snapshot:
        console.print("No network hosts visible.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("Address", style="cyan")
    table.add_column("MAC")
    table.add_column("Name")
    table.add_column("Online")
    table.add_column("Registered", style="yellow")

    for entry in snapshot:
        registered = next(
            (d for d in devices if match_device_to_presence(d, [entry]) is not None),
            None,
        )
        view = registered or DevicesClient.from_presence_entry(entry)
        table.add_row(
            redactor.redact_address(entry.address),
            redactor.redact_mac(entry.mac),
            view.name,
            _format_online(entry.online),
            f"#{registered.id}" if registered else "-",
        )

    console.print(table)
    console.print(f"\n[green]{len(snapshot)} host(s) visible[/green]")


@app.command("commission")
def commission(
    pairing_code: str = typer.Argument(..., help="Mesh pairing code"),
    name: str = typer.Option(..., "--name", "-n", help="Device name"),
    device_type: DeviceType = typer.Option(
        DeviceType.OTHER, "--type", help="Device type"
    ),
    manufacturer: DeviceManufacturer = typer.Option(
        DeviceManufacturer.OTHER, "--manufacturer", help="Manufacturer"
    ),
) -> None:
    """Commission a mesh device and register it."""
    client = _client()

    async def _commission() -> Device:
        if not name.strip():
            raise ValidationError("Device name must contain at least 1 character")
        if not await client.is_name_allowed(name):
            raise ValidationError("Device name must be unique")
        node = await client.commission(pairing_code)
        payload = AddDevicePayload(
            name=name, type=device_type, manufacturer=manufacturer
        )
        return await client.add_device(payload, mesh_node_id=node.node_id)

    device = run_or_exit(_commission())
    Console().print(
        f"[green]✓[/green] Commissioned '{device.name}' as mesh node "
        f"{device.mesh_node_id}"
    )


def register(root: typer.Typer) -> None:
    root.add_typer(app, name="devices")
