"""Data models for wizlan."""

from wizlan.models.commands import (
    Command,
    GetPilot,
    Pilot,
    Registration,
    SetPilot,
    SyncPilotAck,
)
from wizlan.models.responses import (
    Ack,
    Notification,
    RawResponse,
    Response,
    StateReport,
    classify,
    parse_as,
)

__all__ = [
    "Ack",
    "Command",
    "GetPilot",
    "Notification",
    "Pilot",
    "RawResponse",
    "Registration",
    "Response",
    "SetPilot",
    "StateReport",
    "SyncPilotAck",
    "classify",
    "parse_as",
]
