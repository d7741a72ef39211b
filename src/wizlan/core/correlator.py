"""Request/response correlation over the shared socket.

UDP replies carry no request id, so a reply is matched to the outstanding
request by source address and method name. Only one correlated request may
be outstanding per socket at a time; the ``AWAITING_RESPONSE`` state
enforces this across every device sharing the socket.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from wizlan.errors import (
    BulbReturnedFailure,
    InvalidBulbState,
    RequestTimedOut,
    ResponseParseFailed,
)
from wizlan.models.commands import Command
from wizlan.protocol.codec import decode, encode, method_of

from .shared_socket import Address, SharedSocket
from .state import ConnectionState

logger = logging.getLogger(__name__)

Message = Command | dict[str, Any]

_STATE_ERRORS = {
    ConnectionState.IDLE: "Shared socket has not been bound yet",
    ConnectionState.BINDING: "Still waiting for port binding to finish",
    ConnectionState.CLOSED: "The shared socket has been closed",
    ConnectionState.AWAITING_RESPONSE: "Already waiting on a response",
}


@dataclass
class PendingOperation:
    """The one outstanding correlated request.

    ``deadline`` is in event loop time; the wait is abandoned when it passes.
    """

    method: str | None
    future: asyncio.Future[Any]
    deadline: float


class RequestCorrelator:
    def __init__(self, socket: SharedSocket) -> None:
        self._socket = socket
        self.pending: PendingOperation | None = None

    def _check_ready(self, wait: bool) -> None:
        state = self._socket.state.current
        if state is ConnectionState.READY:
            return
        if state is ConnectionState.AWAITING_RESPONSE and not wait:
            return
        expected = [ConnectionState.READY]
        if not wait:
            expected.append(ConnectionState.AWAITING_RESPONSE)
        raise InvalidBulbState(_STATE_ERRORS[state], state, expected)

    async def request(
        self, message: Message, address: str, port: int, timeout: float
    ) -> Any:
        """Send ``message`` and wait for the matching reply.

        Returns:
            The decoded reply payload

        Raises:
            InvalidBulbState: If the socket is not READY
            RequestSendError: If the OS send fails
            RequestTimedOut: If no matching reply arrives within ``timeout``
            ResponseParseFailed: If a reply from ``address`` is not JSON
            BulbReturnedFailure: If the reply carries an ``error`` member
        """
        self._check_ready(wait=True)

        loop = asyncio.get_running_loop()
        method = method_of(message)
        future: asyncio.Future[Any] = loop.create_future()
        pending = PendingOperation(method, future, loop.time() + timeout)
        self.pending = pending

        def observer(data: bytes, addr: Address) -> None:
            if future.done() or addr[0] != address:
                return
            try:
                payload = decode(data)
            except ResponseParseFailed as exc:
                future.set_exception(exc)
                return

            if isinstance(payload, dict):
                if "method" in payload and payload["method"] != method:
                    # reply to some other exchange on the shared socket
                    return
                if "error" in payload:
                    future.set_exception(BulbReturnedFailure(payload))
                    return

            logger.debug("Matched %s reply from %s", method, address)
            future.set_result(payload)

        def on_state_change(state: ConnectionState) -> None:
            if state is ConnectionState.CLOSED and not future.done():
                future.set_exception(
                    InvalidBulbState(
                        "The shared socket was closed while waiting for a response",
                        state,
                        [ConnectionState.AWAITING_RESPONSE],
                    )
                )

        def on_timeout() -> None:
            if not future.done():
                logger.debug("%s to %s timed out after %.2fs", method, address, timeout)
                future.set_exception(RequestTimedOut(timeout))

        self._socket.state.transition(ConnectionState.AWAITING_RESPONSE)
        self._socket.add_observer(observer)
        self._socket.state.add_listener(on_state_change)
        timer = loop.call_at(pending.deadline, on_timeout)
        try:
            self._socket.send(encode(message), address, port)
            return await future
        finally:
            timer.cancel()
            self._socket.remove_observer(observer)
            self._socket.state.remove_listener(on_state_change)
            if self._socket.state.current is ConnectionState.AWAITING_RESPONSE:
                self._socket.state.transition(ConnectionState.READY)
            self.pending = None

    async def send(self, message: Message, address: str, port: int) -> Message:
        """Send ``message`` without waiting for a reply.

        Allowed while another correlated request is outstanding. Returns the
        message that was sent.

        Raises:
            InvalidBulbState: If the socket is not bound or has been closed
            RequestSendError: If the OS send fails
        """
        self._check_ready(wait=False)
        self._socket.send(encode(message), address, port)
        return message
