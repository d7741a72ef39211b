"""Messages received from a bulb.

Payloads are checked against the structural shapes in
``wizlan.protocol.schema`` first and only then loaded into these models.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wizlan.errors import ResponseValidationFailed
from wizlan.protocol.schema import (
    ACK_SHAPE,
    NOTIFICATION_SHAPE,
    STATE_REPORT_SHAPE,
    Shape,
    validate,
)

_MODEL_CONFIG = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


class PilotFields(BaseModel):
    model_config = _MODEL_CONFIG

    state: bool | None = None
    scene_id: int | None = Field(default=None, alias="sceneId")
    speed: int | None = None
    dimming: int | None = None
    temp: int | None = None
    r: int | None = None
    g: int | None = None
    b: int | None = None
    c: int | None = None
    w: int | None = None


class PilotResult(PilotFields):
    mac: str
    rssi: int
    src: str
    state: bool
    scene_id: int = Field(alias="sceneId")


class StateReport(BaseModel):
    """Reply to ``getPilot``: a full state snapshot."""

    model_config = _MODEL_CONFIG

    method: str
    env: str
    result: PilotResult


class AckResult(BaseModel):
    model_config = _MODEL_CONFIG

    success: bool


class Ack(BaseModel):
    """Bare success reply, e.g. to ``setPilot``."""

    model_config = _MODEL_CONFIG

    method: str
    env: str
    result: AckResult


class NotificationParams(PilotFields):
    mac: str
    rssi: int
    src: str
    mqtt_cd: int | None = Field(default=None, alias="mqttCd")
    ts: int | None = None


class Notification(BaseModel):
    """Unsolicited ``syncPilot`` push from a subscribed bulb."""

    model_config = _MODEL_CONFIG

    method: str
    env: str
    id: int | None = None
    params: NotificationParams


class RawResponse(BaseModel):
    """Anything that does not match a known response shape."""

    model_config = ConfigDict(frozen=True)

    payload: Any


Response = Union[StateReport, Ack, Notification, RawResponse]

_SHAPES: list[tuple[Shape, type[BaseModel]]] = [
    (NOTIFICATION_SHAPE, Notification),
    (STATE_REPORT_SHAPE, StateReport),
    (ACK_SHAPE, Ack),
]


def parse_as(model: type[BaseModel], shape: Shape, payload: Any) -> Any:
    """Validate ``payload`` against ``shape`` and load it into ``model``.

    Raises:
        ResponseValidationFailed: If the payload does not conform
    """
    if not validate(shape, payload):
        raise ResponseValidationFailed(payload, model.__name__)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ResponseValidationFailed(payload, model.__name__) from exc


def classify(payload: Any) -> Response:
    for shape, model in _SHAPES:
        if validate(shape, payload):
            try:
                return model.model_validate(payload)  # type: ignore[return-value]
            except ValidationError:
                break
    return RawResponse(payload=payload)
