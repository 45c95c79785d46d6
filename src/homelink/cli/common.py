from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer
from rich.console import Console

from homelink.backends import (
    ArpTablePresenceSource,
    MatterMeshBackend,
    MeshBackend,
    NullPresenceSource,
    PresenceSource,
    UnconfiguredMeshBackend,
    WakeOnLanClient,
    YeelightClient,
)
from homelink.config import (
    Settings,
    data_dir_from_settings,
    get_settings,
    resolve_config_path,
)
from homelink.core import DevicesClient
from homelink.exceptions import HomelinkError
from homelink.storage import Database

T = TypeVar("T")


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_database(settings: Settings, data_dir: Path | None = None) -> Database:
    path = data_dir or data_dir_from_settings(settings)
    return Database(path)


def build_presence_source(settings: Settings) -> PresenceSource:
    if settings.presence.source == "arp":
        return ArpTablePresenceSource(Path(settings.presence.arp_table))
    return NullPresenceSource()


def build_mesh_backend(settings: Settings) -> MeshBackend:
    if settings.mesh.url:
        return MatterMeshBackend(
            settings.mesh.url,
            endpoint=settings.mesh.endpoint,
            timeout=settings.mesh.timeout,
        )
    return UnconfiguredMeshBackend()


def build_client(settings: Settings, db: Database) -> DevicesClient:
    return DevicesClient(
        db,
        presence=build_presence_source(settings),
        mesh=build_mesh_backend(settings),
        lighting=YeelightClient(
            port=settings.lighting.port, timeout=settings.lighting.timeout
        ),
        wake=WakeOnLanClient(
            broadcast=settings.wake.broadcast, port=settings.wake.port
        ),
        state_timeout=settings.state.timeout,
    )


def run_or_exit(coro: Coroutine[Any, Any, T]) -> T:
    """Run a client coroutine, turning homelink errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except HomelinkError as exc:
        Console(stderr=True).print(f"[red]✗[/red] {exc}")
        raise typer.Exit(1) from exc
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
