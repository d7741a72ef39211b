from __future__ import annotations

from typing import Annotated, cast

import typer

from wizlan.utils.logging import LogLevel, setup_logging

from . import config as config_cmd
from .control import register as register_control
from .discover import register as register_discover
from .mock import register as register_mock
from .watch import register as register_watch

app = typer.Typer(
    help="wizlan - control WiZ bulbs on the local network", no_args_is_help=True
)

app.add_typer(config_cmd.app, name="config")

register_discover(app)
register_control(app)
register_watch(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level", help="DEBUG, INFO, WARNING, ... (overrides LOGLEVEL)"
        ),
    ] = None,
    wire: Annotated[
        bool,
        typer.Option("--wire", help="Log every datagram when debugging"),
    ] = False,
) -> None:
    """wizlan CLI."""
    level = cast("LogLevel | None", log_level.upper() if log_level else None)
    setup_logging(level, wire=wire)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"wizlan version {get_version('wizlan')}")
        raise typer.Exit()
