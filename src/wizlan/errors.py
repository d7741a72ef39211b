"""Exception hierarchy for wizlan.

Every failure the client can report is a ``WizlanError`` carrying an
``ErrorCode`` and a ``data`` mapping with the context needed to act on it
(offending value, raw response, underlying OS error, ...).
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wizlan.core.state import ConnectionState


class ErrorCode(Enum):
    ARGUMENT_OUT_OF_RANGE = "argument_out_of_range"
    SOCKET_BIND_FAILED = "socket_bind_failed"
    INVALID_BULB_STATE = "invalid_bulb_state"
    RESPONSE_VALIDATION_FAILED = "response_validation_failed"
    RESPONSE_PARSE_FAILED = "response_parse_failed"
    REQUEST_SEND_ERROR = "request_send_error"
    REQUEST_TIMED_OUT = "request_timed_out"
    BULB_RETURNED_FAILURE = "bulb_returned_failure"


class WizlanError(Exception):
    """Base class for all wizlan errors.

    Attributes:
        code: Error kind
        data: Context for the failure
    """

    code: ErrorCode

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = data or {}
        super().__init__(message)


class ArgumentOutOfRange(WizlanError, ValueError):
    """A caller-supplied value is outside its documented range.

    Raised before any network I/O happens.
    """

    code = ErrorCode.ARGUMENT_OUT_OF_RANGE

    def __init__(self, argument: str, lower: int, upper: int, provided: Any):
        self.argument = argument
        self.lower = lower
        self.upper = upper
        self.provided = provided
        super().__init__(
            f"'{argument}' must be in the range {lower}-{upper} (got {provided})",
            {
                "argument": argument,
                "lower_limit": lower,
                "upper_limit": upper,
                "provided": provided,
            },
        )


class SocketBindFailed(WizlanError):
    """The OS refused to bind the shared listen port."""

    code = ErrorCode.SOCKET_BIND_FAILED

    def __init__(self, port: int, error: OSError):
        self.port = port
        self.error = error
        super().__init__(
            f"Failed to bind to port {port}: {error}", {"port": port, "error": error}
        )


class InvalidBulbState(WizlanError):
    """A correlated send was attempted while the shared socket was not READY.

    Attributes:
        state: Connection state when the send was attempted
        expected: States in which the send would have been accepted
    """

    code = ErrorCode.INVALID_BULB_STATE

    def __init__(
        self,
        reason: str,
        state: ConnectionState,
        expected: list[ConnectionState],
    ):
        self.state = state
        self.expected = expected
        super().__init__(reason, {"state": state, "expected_state": expected})


class ResponseParseFailed(WizlanError):
    """A reply from the target device could not be decoded as JSON."""

    code = ErrorCode.RESPONSE_PARSE_FAILED

    def __init__(self, response: str, error: Exception):
        self.response = response
        self.error = error
        super().__init__(
            "Failed to parse response JSON", {"response": response, "error": error}
        )


class ResponseValidationFailed(WizlanError):
    """A decoded reply does not have the expected shape."""

    code = ErrorCode.RESPONSE_VALIDATION_FAILED

    def __init__(self, response: Any, expected: str = "response"):
        self.response = response
        super().__init__(
            f"Response validation failed (expected {expected})",
            {"response": response, "expected": expected},
        )


class RequestSendError(WizlanError):
    """The OS failed to send a datagram."""

    code = ErrorCode.REQUEST_SEND_ERROR

    def __init__(self, error: Exception):
        self.error = error
        super().__init__(f"Failed to send request to bulb: {error}", {"error": error})


class RequestTimedOut(WizlanError):
    """No matching reply arrived before the deadline."""

    code = ErrorCode.REQUEST_TIMED_OUT

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:.2f}s waiting for a response",
            {"response_wait": timeout},
        )


class BulbReturnedFailure(WizlanError):
    """The device replied with an explicit ``error`` member."""

    code = ErrorCode.BULB_RETURNED_FAILURE

    def __init__(self, response: dict[str, Any]):
        self.response = response
        error = response.get("error")
        super().__init__(f"Bulb returned failure: {error}", {"response": response})
