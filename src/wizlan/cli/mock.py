from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from wizlan.constants import BULB_PORT, LISTEN_PORT
from wizlan.core import run_mock_bulb


def register(app: typer.Typer) -> None:
    @app.command()
    def mock(
        port: int = typer.Option(BULB_PORT, "--port", "-p", help="Port to listen on"),
        mac: str = typer.Option("a8bb50000001", "--mac", help="MAC address to report"),
        notify_port: int = typer.Option(
            LISTEN_PORT, "--notify-port", help="Port to push notifications to"
        ),
        interval: float = typer.Option(
            5.0, "--interval", help="Seconds between notifications"
        ),
    ) -> None:
        """Run a mock bulb for development."""
        console = Console()
        console.print(f"Starting mock bulb {mac} on port {port}...")
        console.print("Press Ctrl+C to stop.\n")

        try:
            asyncio.run(
                run_mock_bulb(
                    port=port, mac=mac, notify_port=notify_port, sync_interval=interval
                )
            )
        except KeyboardInterrupt:
            console.print("\n[green]Mock bulb stopped.[/green]")
