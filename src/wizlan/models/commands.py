"""Messages sent to a bulb."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wizlan.errors import ArgumentOutOfRange

# wire name -> (lower, upper), both inclusive
PILOT_RANGES: dict[str, tuple[int, int]] = {
    "dimming": (1, 100),
    "temp": (1000, 10_000),
    "r": (0, 255),
    "g": (0, 255),
    "b": (0, 255),
    "c": (0, 255),
    "w": (0, 255),
    "sceneId": (1, 32),
    "speed": (1, 100),
}


def _bounded(name: str, **kwargs: Any) -> Any:
    lower, upper = PILOT_RANGES[name]
    return Field(default=None, strict=True, ge=lower, le=upper, **kwargs)


class Pilot(BaseModel):
    """Sparse bulb state. Only the fields that are set are sent.

    Raises:
        ArgumentOutOfRange: If a numeric field is not an integer within
            its range
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    state: bool | None = Field(default=None, strict=True)
    dimming: int | None = _bounded("dimming")
    temp: int | None = _bounded("temp")
    r: int | None = _bounded("r")
    g: int | None = _bounded("g")
    b: int | None = _bounded("b")
    c: int | None = _bounded("c")
    w: int | None = _bounded("w")
    scene_id: int | None = _bounded("sceneId", alias="sceneId")
    speed: int | None = _bounded("speed")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            error = exc.errors()[0]
            argument = str(error["loc"][0]) if error["loc"] else ""
            if argument == "scene_id":
                argument = "sceneId"
            if argument not in PILOT_RANGES:
                raise
            lower, upper = PILOT_RANGES[argument]
            raise ArgumentOutOfRange(argument, lower, upper, error["input"]) from exc

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.state is not None:
            params["state"] = self.state
        if self.scene_id is not None:
            params["sceneId"] = self.scene_id
        for key in ("speed", "dimming", "temp", "r", "g", "b", "c", "w"):
            value = getattr(self, key)
            if value is not None:
                params[key] = value
        return params


@dataclass(frozen=True)
class GetPilot:
    method: ClassVar[str] = "getPilot"

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "params": {}}


@dataclass(frozen=True)
class SetPilot:
    method: ClassVar[str] = "setPilot"

    pilot: Pilot

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "params": self.pilot.to_params()}


def _registration_id() -> int:
    return random.randint(1, 10_000)


@dataclass(frozen=True)
class Registration:
    """Subscription handshake asking the bulb to push ``syncPilot`` updates."""

    method: ClassVar[str] = "registration"

    phone_ip: str
    phone_mac: str
    register: bool = True
    id: int = field(default_factory=_registration_id)
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "id": self.id,
            "version": self.version,
            "params": {
                "register": self.register,
                "phoneIp": self.phone_ip,
                "phoneMac": self.phone_mac,
            },
        }


@dataclass(frozen=True)
class SyncPilotAck:
    """Acknowledgement for a ``syncPilot`` notification."""

    method: ClassVar[str] = "syncPilot"

    mac: str
    env: str
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        message: dict[str, Any] = {"method": self.method}
        if self.id is not None:
            message["id"] = self.id
        message["env"] = self.env
        message["result"] = {"mac": self.mac}
        return message


Command = Union[GetPilot, SetPilot, Registration, SyncPilotAck]
