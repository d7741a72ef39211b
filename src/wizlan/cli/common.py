from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, TypeVar

import typer

from wizlan.config import Settings, get_settings, resolve_config_path
from wizlan.core import Device, SharedSocket
from wizlan.errors import WizlanError

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


def build_socket(settings: Settings) -> SharedSocket:
    return SharedSocket(settings.network.listen_port)


def build_device(
    address: str, settings: Settings, socket: SharedSocket | None = None
) -> Device:
    return Device(
        address,
        port=settings.network.bulb_port,
        response_timeout=settings.network.response_timeout,
        socket=socket or build_socket(settings),
    )


def run_or_exit(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` and turn wizlan errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except (WizlanError, ValueError, RuntimeError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
