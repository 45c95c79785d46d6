from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from .common import build_database, load_settings_or_exit, resolve_config_path_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def init(
        data_dir: Annotated[
            Path | None,
            typer.Option("--data-dir", help="Store the registry somewhere else"),
        ] = None,
    ) -> None:
        """Create the device registry and conversation store."""
        console = Console()

        settings = load_settings_or_exit()
        db = build_database(settings, data_dir=data_dir)
        try:
            db.init()
            count = len(db.list_devices())
        except ValueError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(1) from exc

        console.print(f"[green]✓[/green] Registry ready in {db.path}")
        console.print(f"  • {db.devices_path} ({count} device(s))")
        console.print(f"  • {db.conversations_path} (onboarding progress)")

        if not settings.mesh.url:
            console.print("  • mesh controller not configured; mesh devices disabled")

        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)
        if not config_exists:
            console.print(
                f"\nNo config at {config_path}; "
                "run 'homelink config init' to write one."
            )
