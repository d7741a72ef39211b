"""The single UDP socket shared by every device in the process.

Bulbs send replies and notifications to a fixed port (38900 by default), so
only one socket can listen for them. Every ``Device`` holds a non-owning
handle to the same ``SharedSocket`` and is gated by its connection state.

Calling ``close()`` through any handle ends communication for all of them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from wizlan.constants import LISTEN_PORT
from wizlan.errors import RequestSendError, SocketBindFailed

from .state import ConnectionState, ConnectionStateMachine

logger = logging.getLogger(__name__)

Address = tuple[str, int]
DatagramObserver = Callable[[bytes, Address], None]


class SharedSocket(asyncio.DatagramProtocol):
    def __init__(
        self, listen_port: int = LISTEN_PORT, listen_address: str = "0.0.0.0"
    ) -> None:
        self.listen_port = listen_port
        self.listen_address = listen_address
        self.state = ConnectionStateMachine()
        self._transport: asyncio.DatagramTransport | None = None
        self._observers: list[DatagramObserver] = []
        self._bind_lock: asyncio.Lock | None = None
        self._sending = False
        self._send_error: OSError | None = None

    def __repr__(self) -> str:
        return (
            f"SharedSocket({self.listen_address}:{self.listen_port}, "
            f"state={self.state.current.name})"
        )

    @property
    def local_port(self) -> int | None:
        """Port actually bound by the OS, or None before binding."""
        if self._transport is None:
            return None
        sockname = self._transport.get_extra_info("sockname")
        return sockname[1] if sockname else None

    # Lifecycle

    async def bind(self) -> None:
        """Bind the listen port. Safe to call repeatedly.

        Raises:
            SocketBindFailed: If the OS refuses the bind. The state stays
                BINDING and ``bind()`` may be retried.
        """
        if self._bind_lock is None:
            self._bind_lock = asyncio.Lock()

        async with self._bind_lock:
            current = self.state.current
            if current not in (ConnectionState.IDLE, ConnectionState.BINDING):
                return
            if current is ConnectionState.IDLE:
                self.state.transition(ConnectionState.BINDING)

            logger.debug(
                "Binding shared socket to %s:%d", self.listen_address, self.listen_port
            )
            try:
                await self._open_endpoint()
            except OSError as exc:
                logger.debug("Bind to port %d failed: %s", self.listen_port, exc)
                raise SocketBindFailed(self.listen_port, exc) from exc

            if self.state.current is ConnectionState.CLOSED:
                # closed while the bind was in flight
                self._close_transport()
                return
            self.state.transition(ConnectionState.READY)
            logger.debug("Shared socket listening on port %s", self.local_port)

    async def _open_endpoint(self) -> None:
        loop = asyncio.get_running_loop()
        await loop.create_datagram_endpoint(
            lambda: self,
            local_addr=(self.listen_address, self.listen_port),
            allow_broadcast=True,
        )

    def close(self) -> None:
        """Close the socket for every device sharing it."""
        if self.state.current is ConnectionState.CLOSED:
            return
        self.state.transition(ConnectionState.CLOSED)
        self.state.clear_listeners()
        self._observers.clear()
        self._close_transport()
        logger.debug("Shared socket closed")

    def _close_transport(self) -> None:
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    # Sending and receiving

    def send(self, data: bytes, address: str, port: int) -> None:
        """Send one datagram without waiting for anything.

        Raises:
            RequestSendError: If the socket is not open or the OS send fails
        """
        transport = self._transport
        if transport is None or transport.is_closing():
            raise RequestSendError(ConnectionError("Shared socket is not open"))

        self._sending = True
        self._send_error = None
        try:
            transport.sendto(data, (address, port))
        except OSError as exc:
            raise RequestSendError(exc) from exc
        finally:
            self._sending = False

        # selector transports report sendto failures via error_received
        if self._send_error is not None:
            error, self._send_error = self._send_error, None
            raise RequestSendError(error) from error

        logger.debug("Sent %d bytes to %s:%d", len(data), address, port)

    def add_observer(self, observer: DatagramObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: DatagramObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def has_observer(self, observer: DatagramObserver) -> bool:
        return observer in self._observers

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    # asyncio.DatagramProtocol

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            logger.warning("Shared socket lost: %s", exc)
        self._transport = None

    def datagram_received(self, data: bytes, addr: Address) -> None:
        logger.debug("Received %d bytes from %s:%d", len(data), addr[0], addr[1])
        # snapshot: observers may remove themselves while being called
        for observer in list(self._observers):
            try:
                observer(data, addr)
            except Exception:
                logger.exception("Datagram observer %r failed", observer)

    def error_received(self, exc: Exception) -> None:
        if self._sending and isinstance(exc, OSError):
            self._send_error = exc
            return
        logger.warning("Shared socket error: %s", exc)


_shared_socket: SharedSocket | None = None


def get_shared_socket(listen_port: int = LISTEN_PORT) -> SharedSocket:
    """Return the process-wide socket, creating it on first use."""
    global _shared_socket
    if _shared_socket is None:
        _shared_socket = SharedSocket(listen_port)
    elif _shared_socket.listen_port != listen_port:
        logger.warning(
            "Shared socket already uses port %d, ignoring requested port %d",
            _shared_socket.listen_port,
            listen_port,
        )
    return _shared_socket
