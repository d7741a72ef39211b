from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from wizlan.config import Settings
from wizlan.models import Notification

from .common import build_device, load_settings_or_exit, run_or_exit


def _describe(notification: Notification) -> str:
    params = notification.params
    parts = [f"state={'on' if params.state else 'off'}"]
    if params.scene_id:
        parts.append(f"scene={params.scene_id}")
    if params.dimming is not None:
        parts.append(f"dimming={params.dimming}%")
    if params.temp is not None:
        parts.append(f"temp={params.temp}K")
    if params.r is not None:
        parts.append(f"rgb=({params.r}, {params.g}, {params.b})")
    parts.append(f"rssi={params.rssi}")
    return " ".join(parts)


async def _watch(
    address: str, settings: Settings, duration: float | None, console: Console
) -> int:
    device = build_device(address, settings)
    received = 0

    def on_sync(notification: Notification) -> None:
        nonlocal received
        received += 1
        console.print(f"[cyan]{address}[/cyan] {_describe(notification)}")

    await device.connect()
    try:
        await device.subscribe(settings.network.local_ip)
        device.on_sync(on_sync)
        console.print(f"Subscribed to {address}, waiting for updates...")
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        device.close()
    return received


def register(app: typer.Typer) -> None:
    @app.command()
    def watch(
        address: str = typer.Argument(..., help="Bulb IP address"),
        duration: float | None = typer.Option(
            None, "--duration", "-d", help="Stop after this many seconds"
        ),
    ) -> None:
        """Subscribe to a bulb and print its state updates."""
        console = Console()
        settings = load_settings_or_exit()

        try:
            received = run_or_exit(_watch(address, settings, duration, console))
        except KeyboardInterrupt:
            console.print("\n[green]Stopped watching.[/green]")
            return
        console.print(f"\n[green]Received {received} update(s)[/green]")
