from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.table import Table

from wizlan.config import Settings
from wizlan.core import Device, discover
from wizlan.errors import WizlanError
from wizlan.models import StateReport
from wizlan.utils.redaction import Redactor

from .common import build_socket, load_settings_or_exit, run_or_exit

logger = logging.getLogger(__name__)


async def _discover_with_state(
    settings: Settings, address: str | None, wait: float
) -> list[tuple[Device, StateReport | None]]:
    socket = build_socket(settings)
    devices = await discover(
        address, settings.network.bulb_port, wait, socket=socket
    )
    results: list[tuple[Device, StateReport | None]] = []
    try:
        if devices:
            await socket.bind()
        for device in devices:
            device.response_timeout = settings.network.response_timeout
            try:
                report = await device.get_pilot()
            except WizlanError as exc:
                logger.debug("Could not fetch state of %s: %s", device.address, exc)
                report = None
            results.append((device, report))
    finally:
        socket.close()
    return results


def register(app: typer.Typer) -> None:
    @app.command("discover")
    def discover_cmd(
        address: str | None = typer.Argument(
            None,
            help=(
                "Address to probe (e.g., 192.168.1.255). "
                "Uses config or the local broadcast address if omitted."
            ),
        ),
        wait: float | None = typer.Option(
            None, "--wait", "-w", help="Seconds to wait for replies"
        ),
        redact: bool = typer.Option(
            False,
            "--redact",
            help="Redact sensitive values in output",
        ),
    ) -> None:
        """Discover bulbs on the local network."""
        console = Console()

        settings = load_settings_or_exit()
        target = address or settings.discovery.broadcast_address
        window = wait if wait is not None else settings.discovery.wait

        console.print(f"Discovering bulbs via {target or 'local broadcast'}...")
        results = run_or_exit(
            _discover_with_state(settings, target, window)
        )

        if not results:
            console.print("No bulbs found.")
            return

        redactor = Redactor(enabled=redact)
        table = Table()
        table.add_column("IP", style="cyan")
        table.add_column("MAC Address")
        table.add_column("State", style="green")
        table.add_column("Scene")
        table.add_column("Brightness")
        table.add_column("RSSI")

        for device, report in results:
            if report is None:
                table.add_row(redactor.redact_ip(device.address), "?", "?", "", "", "")
                continue
            pilot = report.result
            table.add_row(
                redactor.redact_ip(device.address),
                redactor.redact_mac(pilot.mac),
                "on" if pilot.state else "off",
                str(pilot.scene_id),
                "" if pilot.dimming is None else f"{pilot.dimming}%",
                str(pilot.rssi),
            )

        console.print(table)
        console.print(f"\n[green]Found {len(results)} bulb(s)[/green]")
