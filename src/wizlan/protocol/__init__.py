from __future__ import annotations

from .codec import decode, encode, method_of
from .schema import (
    ACK_SHAPE,
    NOTIFICATION_SHAPE,
    PILOT_SHAPE,
    STATE_REPORT_SHAPE,
    Shape,
    validate,
)

__all__ = [
    "ACK_SHAPE",
    "NOTIFICATION_SHAPE",
    "PILOT_SHAPE",
    "STATE_REPORT_SHAPE",
    "Shape",
    "decode",
    "encode",
    "method_of",
    "validate",
]
