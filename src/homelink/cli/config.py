from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from homelink.config import Settings, render_settings_toml, write_settings

from .common import load_settings_or_exit, resolve_config_path_or_exit

app = typer.Typer(
    no_args_is_help=True, help="Inspect or create the backend configuration"
)


def _backend_summary(settings: Settings) -> list[str]:
    mesh = settings.mesh.url or "not configured"
    presence = (
        settings.presence.arp_table if settings.presence.source == "arp" else "off"
    )
    return [
        f"Mesh controller: {mesh}",
        f"Presence: {presence}",
        f"Yeelight port: {settings.lighting.port}",
        f"Wake-on-LAN: {settings.wake.broadcast}:{settings.wake.port}",
    ]


@app.command("show")
def show_config(
    raw: Annotated[
        bool, typer.Option("--raw", help="Print only the TOML document")
    ] = False,
) -> None:
    """Show which backends homelink will use, then the effective TOML."""
    settings = load_settings_or_exit()
    if raw:
        typer.echo(render_settings_toml(settings))
        return

    path, exists = resolve_config_path_or_exit(allow_missing=True)
    console = Console()
    console.print(f"[bold]Config:[/bold] {path if exists else 'built-in defaults'}")
    for line in _backend_summary(settings):
        console.print(f"  • {line}")
    console.print()
    typer.echo(render_settings_toml(settings))


@app.command("init")
def init_config(
    mesh_url: Annotated[
        str,
        typer.Option("--mesh-url", help="python-matter-server WebSocket url"),
    ] = "",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Write a config file, optionally pointing at a mesh controller."""
    path, exists = resolve_config_path_or_exit(allow_missing=True)

    if exists and not force:
        typer.echo(f"Config already exists at {path} (use --force to replace it)")
        raise typer.Exit(1)

    defaults = Settings()
    settings = defaults.model_copy(
        update={"mesh": defaults.mesh.model_copy(update={"url": mesh_url})}
    )
    write_settings(settings, path)
    typer.echo(f"Wrote config to {path}")
