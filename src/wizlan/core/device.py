"""High-level handle for one bulb.

Every ``Device`` shares the process-wide ``SharedSocket`` (unless another
socket is passed in) and therefore its connection state: only one
request that waits for a reply may be in flight across all devices at a
time. Requests from concurrent tasks must be serialized by the caller,
otherwise they fail with ``InvalidBulbState``.

``Device.close()`` closes the shared socket. It ends communication for
every other ``Device`` using it as well.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from wizlan.constants import (
    ADJUSTABLE_DIMMING_SCENES,
    ADJUSTABLE_SPEED_SCENES,
    BULB_PORT,
    DEFAULT_RESPONSE_TIMEOUT,
    LISTEN_PORT,
    SCENES,
)
from wizlan.errors import ResponseParseFailed
from wizlan.models.commands import GetPilot, Pilot, SetPilot
from wizlan.models.responses import (
    Ack,
    Notification,
    Response,
    StateReport,
    classify,
    parse_as,
)
from wizlan.protocol.codec import decode
from wizlan.protocol.schema import ACK_SHAPE, STATE_REPORT_SHAPE
from wizlan.utils.color import hex_to_rgb
from wizlan.utils.network import detect_local_ip, random_mac

from .correlator import Message, RequestCorrelator
from .shared_socket import Address, SharedSocket, get_shared_socket
from .state import ConnectionState
from .subscription import SubscriptionEngine

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]


class Device:
    def __init__(
        self,
        address: str,
        port: int = BULB_PORT,
        listen_port: int = LISTEN_PORT,
        response_timeout: float | None = None,
        mac_identifier: str | None = None,
        socket: SharedSocket | None = None,
    ) -> None:
        self._address = address
        self.port = port
        self.response_timeout = response_timeout
        self.mac_identifier = mac_identifier or random_mac()
        self._socket = socket or get_shared_socket(listen_port)
        self._correlator = RequestCorrelator(self._socket)
        self._subscription = SubscriptionEngine(
            self._socket, self._correlator, address, port, self.mac_identifier
        )

    def __repr__(self) -> str:
        return f"Device({self._address}:{self.port})"

    @property
    def address(self) -> str:
        return self._address

    @property
    def listen_port(self) -> int:
        return self._socket.listen_port

    @property
    def socket(self) -> SharedSocket:
        return self._socket

    @property
    def state(self) -> ConnectionState:
        """Connection state of the shared socket (same for every device)."""
        return self._socket.state.current

    @property
    def timeout(self) -> float:
        if self.response_timeout is None:
            return DEFAULT_RESPONSE_TIMEOUT
        return self.response_timeout

    # Connection

    async def connect(self) -> None:
        """Bind the shared socket. Devices bind lazily on first use too."""
        await self._socket.bind()

    def close(self) -> None:
        """Close the shared socket.

        This is not scoped to this device: every ``Device`` sharing the
        socket stops working, and the socket cannot be reopened.
        """
        logger.debug("Closing shared socket via %r", self)
        self._socket.close()

    # Low-level messaging

    async def send_raw(self, message: Message, wait: bool = True) -> Any:
        """Send any message to the bulb.

        With ``wait`` the decoded reply is returned, otherwise the message
        itself once the OS accepted it.
        """
        if self._socket.state.current is ConnectionState.IDLE:
            await self._socket.bind()

        if wait:
            return await self._correlator.request(
                message, self._address, self.port, self.timeout
            )
        return await self._correlator.send(message, self._address, self.port)

    async def get_pilot(self) -> StateReport:
        """Fetch the current state of the bulb."""
        response = await self.send_raw(GetPilot())
        return parse_as(StateReport, STATE_REPORT_SHAPE, response)

    async def set_pilot(self, pilot: Pilot) -> Ack:
        response = await self.send_raw(SetPilot(pilot))
        return parse_as(Ack, ACK_SHAPE, response)

    # Convenience commands

    async def turn(self, on: bool) -> Ack:
        return await self.set_pilot(Pilot(state=on))

    async def toggle(self) -> Ack:
        report = await self.get_pilot()
        return await self.set_pilot(Pilot(state=not report.result.state))

    async def brightness(self, value: int) -> Ack:
        """Set brightness in percent (1-100)."""
        return await self.set_pilot(Pilot(dimming=value))

    async def white(self, temp: int) -> Ack:
        """Switch to white light of the given temperature (1000-10000 K)."""
        return await self.set_pilot(Pilot(temp=temp))

    async def color(
        self,
        hex_color: str | None = None,
        *,
        r: int | None = None,
        g: int | None = None,
        b: int | None = None,
        c: int | None = None,
        w: int | None = None,
    ) -> Ack:
        """Set the color from a hex code or from r/g/b/c/w components (0-255).

        ``c`` and ``w`` are the cool and warm white channels.

        Example::

            await device.color("#f44336")
            await device.color(r=100, w=50)
        """
        if hex_color is not None:
            r, g, b = hex_to_rgb(hex_color)
        return await self.set_pilot(Pilot(r=r, g=g, b=b, c=c, w=w))

    async def scene(
        self,
        scene: int | str,
        speed: int | None = None,
        dimming: int | None = None,
    ) -> Ack:
        """Switch to a built-in scene, by id (1-32) or by name (see ``SCENES``).

        Raises:
            ArgumentOutOfRange: If the scene id, speed or dimming is out of range
            ValueError: If the scene name is unknown or the scene does not
                support the requested speed or dimming
        """
        if isinstance(scene, str):
            if scene not in SCENES:
                raise ValueError(f"Unknown scene: {scene!r}")
            scene = SCENES[scene]

        pilot = Pilot(scene_id=scene, speed=speed, dimming=dimming)
        if speed is not None and scene not in ADJUSTABLE_SPEED_SCENES:
            raise ValueError(f"Scene {scene} does not support speed")
        if dimming is not None and scene not in ADJUSTABLE_DIMMING_SCENES:
            raise ValueError(f"Scene {scene} does not support dimming")
        return await self.set_pilot(pilot)

    # Observers

    def on_message(self, fn: Callable[[Response], None]) -> Unsubscribe:
        """Call ``fn`` with every decodable message from this bulb."""

        def observer(data: bytes, addr: Address) -> None:
            if addr[0] != self._address:
                return
            try:
                payload = decode(data)
            except ResponseParseFailed:
                return
            fn(classify(payload))

        self._socket.add_observer(observer)
        return lambda: self._socket.remove_observer(observer)

    def on_sync(self, fn: Callable[[Notification], None]) -> Unsubscribe:
        """Call ``fn`` with every ``syncPilot`` notification from this bulb.

        Notifications only arrive after ``subscribe()``, and each one is
        acknowledged before ``fn`` runs.
        """
        self._subscription.add_listener(fn)
        return lambda: self._subscription.remove_listener(fn)

    # Subscription

    @property
    def subscribed(self) -> bool:
        return self._subscription.subscribed

    async def subscribe(self, local_ip: str | None = None) -> Any:
        """Ask the bulb to push its state to us every few seconds.

        Each push is acknowledged automatically, which keeps the
        subscription alive. Use ``on_sync`` to receive the pushes.

        Args:
            local_ip: Address the bulb should send notifications to.
                Detected from the default route if omitted.
        """
        if self._socket.state.current is ConnectionState.IDLE:
            await self._socket.bind()
        return await self._subscription.subscribe(
            local_ip or detect_local_ip(), self.timeout
        )

    def unsubscribe(self) -> None:
        """Stop acknowledging notifications from this bulb.

        The shared socket stays open; the bulb stops pushing once it notices
        the missing acks.
        """
        self._subscription.unsubscribe()
