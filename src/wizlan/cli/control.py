from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console

from wizlan.config import Settings
from wizlan.constants import SCENES
from wizlan.core import Device

from .common import build_device, load_settings_or_exit, run_or_exit

T = TypeVar("T")


async def _with_device(
    address: str, settings: Settings, action: Callable[[Device], Awaitable[T]]
) -> T:
    device = build_device(address, settings)
    await device.connect()
    try:
        return await action(device)
    finally:
        device.close()


def _run(address: str, action: Callable[[Device], Awaitable[T]]) -> T:
    settings = load_settings_or_exit()
    return run_or_exit(_with_device(address, settings, action))


def _resolve_scene(value: str) -> int | str:
    if value.isdigit():
        return int(value)
    for name in SCENES:
        if name.lower() == value.lower():
            return name
    return value


def register(app: typer.Typer) -> None:
    @app.command()
    def state(address: str = typer.Argument(..., help="Bulb IP address")) -> None:
        """Show the current state of a bulb."""
        report = _run(address, lambda device: device.get_pilot())
        pilot = report.result

        console = Console()
        console.print(f"[bold]{address}[/bold] ({pilot.mac})")
        console.print(f"State: {'on' if pilot.state else 'off'}")
        console.print(f"Scene: {pilot.scene_id}")
        if pilot.dimming is not None:
            console.print(f"Brightness: {pilot.dimming}%")
        if pilot.temp is not None:
            console.print(f"Temperature: {pilot.temp}K")
        if pilot.r is not None:
            console.print(f"RGB: {pilot.r}, {pilot.g}, {pilot.b}")
        console.print(f"RSSI: {pilot.rssi}")

    @app.command()
    def on(address: str = typer.Argument(..., help="Bulb IP address")) -> None:
        """Turn a bulb on."""
        _run(address, lambda device: device.turn(True))
        typer.echo(f"{address}: on")

    @app.command()
    def off(address: str = typer.Argument(..., help="Bulb IP address")) -> None:
        """Turn a bulb off."""
        _run(address, lambda device: device.turn(False))
        typer.echo(f"{address}: off")

    @app.command()
    def toggle(address: str = typer.Argument(..., help="Bulb IP address")) -> None:
        """Turn a bulb on if it is off and vice versa."""
        _run(address, lambda device: device.toggle())
        typer.echo(f"{address}: toggled")

    @app.command()
    def brightness(
        address: str = typer.Argument(..., help="Bulb IP address"),
        value: int = typer.Argument(..., help="Brightness in percent (1-100)"),
    ) -> None:
        """Set the brightness of a bulb."""
        _run(address, lambda device: device.brightness(value))
        typer.echo(f"{address}: brightness {value}%")

    @app.command()
    def white(
        address: str = typer.Argument(..., help="Bulb IP address"),
        kelvin: int = typer.Argument(..., help="Color temperature (1000-10000)"),
    ) -> None:
        """Switch a bulb to white light."""
        _run(address, lambda device: device.white(kelvin))
        typer.echo(f"{address}: white {kelvin}K")

    @app.command()
    def color(
        address: str = typer.Argument(..., help="Bulb IP address"),
        hex_color: str = typer.Argument(..., help="Hex color, e.g. '#f44336'"),
    ) -> None:
        """Set the color of a bulb."""
        _run(address, lambda device: device.color(hex_color))
        typer.echo(f"{address}: color {hex_color}")

    @app.command()
    def scene(
        address: str = typer.Argument(..., help="Bulb IP address"),
        name: str = typer.Argument(..., help="Scene name or id (1-32)"),
        speed: int | None = typer.Option(None, help="Scene speed (1-100)"),
        dimming: int | None = typer.Option(None, help="Scene brightness (1-100)"),
    ) -> None:
        """Switch a bulb to a built-in scene."""
        scene_ref = _resolve_scene(name)
        _run(address, lambda device: device.scene(scene_ref, speed, dimming))
        typer.echo(f"{address}: scene {name}")

    @app.command("scenes")
    def list_scenes() -> None:
        """List the built-in scenes."""
        for name, scene_id in SCENES.items():
            typer.echo(f"{scene_id:>2}  {name}")
