from __future__ import annotations

from typing import Annotated

import typer

from homelink.utils.logging import setup_logging

from . import config as config_cmd
from .devices import register as register_devices
from .init_cmd import register as register_init
from .onboard import register as register_onboard
from .power import register as register_power

app = typer.Typer(
    help="homelink - control smart-home devices across protocols", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")

register_init(app)
register_devices(app)
register_power(app)
register_onboard(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """homelink CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"homelink version {get_version('homelink')}")
        raise typer.Exit()
