"""wizlan - control WiZ light bulbs over the local network."""

from __future__ import annotations

from importlib.metadata import version

from .config import Settings, get_settings
from .constants import SCENES
from .core import ConnectionState, Device, SharedSocket, discover, get_shared_socket
from .errors import (
    ArgumentOutOfRange,
    BulbReturnedFailure,
    ErrorCode,
    InvalidBulbState,
    RequestSendError,
    RequestTimedOut,
    ResponseParseFailed,
    ResponseValidationFailed,
    SocketBindFailed,
    WizlanError,
)
from .models import Ack, Notification, Pilot, StateReport

__all__ = [
    "SCENES",
    "Ack",
    "ArgumentOutOfRange",
    "BulbReturnedFailure",
    "ConnectionState",
    "Device",
    "ErrorCode",
    "InvalidBulbState",
    "Notification",
    "Pilot",
    "RequestSendError",
    "RequestTimedOut",
    "ResponseParseFailed",
    "ResponseValidationFailed",
    "Settings",
    "SharedSocket",
    "SocketBindFailed",
    "StateReport",
    "WizlanError",
    "__version__",
    "discover",
    "get_settings",
    "get_shared_socket",
]

__version__ = version("wizlan")
