"""Structural validation of decoded payloads.

A shape maps a field name either to a ``(kind, required)`` pair or to a
nested shape. Kinds are ``"str"``, ``"number"`` and ``"bool"``. A nested
shape requires the field to be present and to be an object itself.

Example::

    {
        "method": ("str", True),
        "result": {"success": ("bool", True)},
    }
"""

from __future__ import annotations

from typing import Any, Literal, Union

Kind = Literal["str", "number", "bool"]
Shape = dict[str, Union[tuple[Kind, bool], "Shape"]]


def _matches_kind(kind: Kind, value: Any) -> bool:
    # bool is a subclass of int, keep it out of "number"
    if kind == "bool":
        return isinstance(value, bool)
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, str)


def validate(shape: Shape, payload: Any) -> bool:
    """Return True if ``payload`` conforms to ``shape``."""
    if not isinstance(payload, dict):
        return False

    for key, rule in shape.items():
        if isinstance(rule, dict):
            if not validate(rule, payload.get(key)):
                return False
            continue

        kind, required = rule
        if key not in payload:
            if required:
                return False
            continue
        if not _matches_kind(kind, payload[key]):
            return False

    return True


PILOT_SHAPE: Shape = {
    "sceneId": ("number", False),
    "speed": ("number", False),
    "dimming": ("number", False),
    "temp": ("number", False),
    "r": ("number", False),
    "g": ("number", False),
    "b": ("number", False),
    "c": ("number", False),
    "w": ("number", False),
    "state": ("bool", False),
}

STATE_REPORT_SHAPE: Shape = {
    "method": ("str", True),
    "env": ("str", True),
    "result": {
        "mac": ("str", True),
        "rssi": ("number", True),
        "src": ("str", True),
        "state": ("bool", True),
        "sceneId": ("number", True),
        "temp": ("number", False),
        "speed": ("number", False),
        "r": ("number", False),
        "g": ("number", False),
        "b": ("number", False),
        "c": ("number", False),
        "w": ("number", False),
        "dimming": ("number", False),
    },
}

ACK_SHAPE: Shape = {
    "method": ("str", True),
    "env": ("str", True),
    "result": {
        "success": ("bool", True),
    },
}

NOTIFICATION_SHAPE: Shape = {
    "method": ("str", True),
    "env": ("str", True),
    "id": ("number", False),
    "params": {
        "mac": ("str", True),
        "rssi": ("number", True),
        "src": ("str", True),
        "mqttCd": ("number", False),
        "ts": ("number", False),
        **PILOT_SHAPE,
    },
}
