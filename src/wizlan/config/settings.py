from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from wizlan.constants import (
    BULB_PORT,
    DEFAULT_DISCOVER_WAIT,
    DEFAULT_RESPONSE_TIMEOUT,
    LISTEN_PORT,
)

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "WIZLAN_CONFIG"


class NetworkConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    bulb_port: int = Field(default=BULB_PORT, ge=1, le=65535)
    listen_port: int = Field(default=LISTEN_PORT, ge=0, le=65535)
    response_timeout: float = Field(default=DEFAULT_RESPONSE_TIMEOUT, gt=0)
    local_ip: str | None = None


class DiscoveryConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    broadcast_address: str | None = None
    wait: float = Field(default=DEFAULT_DISCOVER_WAIT, gt=0)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _optional(key: str, value: str | None) -> str:
    if value is None:
        return f"# {key} = \"\""
    return f"{key} = {_toml_string(value)}"


def render_settings_toml(settings: Settings) -> str:
    lines = [
        "# wizlan configuration",
        "",
        "[network]",
        f"bulb_port = {settings.network.bulb_port}",
        f"listen_port = {settings.network.listen_port}",
        f"response_timeout = {settings.network.response_timeout}",
        _optional("local_ip", settings.network.local_ip),
        "",
        "[discovery]",
        _optional("broadcast_address", settings.discovery.broadcast_address),
        f"wait = {settings.discovery.wait}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
