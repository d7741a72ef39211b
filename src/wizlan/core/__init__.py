from __future__ import annotations

from .correlator import PendingOperation, RequestCorrelator
from .device import Device
from .discovery import discover, probe
from .mock_bulb import MockBulb, run_mock_bulb
from .shared_socket import SharedSocket, get_shared_socket
from .state import ConnectionState, ConnectionStateMachine, InvalidTransition
from .subscription import SubscriptionEngine

__all__ = [
    "ConnectionState",
    "ConnectionStateMachine",
    "Device",
    "InvalidTransition",
    "MockBulb",
    "PendingOperation",
    "RequestCorrelator",
    "SharedSocket",
    "SubscriptionEngine",
    "discover",
    "get_shared_socket",
    "probe",
    "run_mock_bulb",
]
