"""Registration handshake and ``syncPilot`` keepalive.

After a successful ``registration`` exchange the bulb pushes its state every
few seconds and expects each push to be acknowledged. Missing acks make the
bulb drop the subscriber, so every notification is acked as soon as it
arrives, before any listener runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from wizlan.errors import (
    RequestSendError,
    ResponseParseFailed,
    ResponseValidationFailed,
)
from wizlan.models.commands import Registration, SyncPilotAck
from wizlan.models.responses import Notification, parse_as
from wizlan.protocol.codec import decode, encode
from wizlan.protocol.schema import NOTIFICATION_SHAPE

from .correlator import RequestCorrelator
from .shared_socket import Address, SharedSocket

logger = logging.getLogger(__name__)

NotificationListener = Callable[[Notification], None]


class SubscriptionEngine:
    def __init__(
        self,
        socket: SharedSocket,
        correlator: RequestCorrelator,
        address: str,
        port: int,
        mac_identifier: str,
    ) -> None:
        self._socket = socket
        self._correlator = correlator
        self.address = address
        self.port = port
        self.mac_identifier = mac_identifier
        self._listeners: list[NotificationListener] = []

    @property
    def subscribed(self) -> bool:
        return self._socket.has_observer(self._on_datagram)

    async def subscribe(self, local_ip: str, timeout: float) -> Any:
        """Register with the bulb and start acknowledging its notifications.

        Returns:
            The bulb's reply to the registration message
        """
        registration = Registration(phone_ip=local_ip, phone_mac=self.mac_identifier)
        response = await self._correlator.request(
            registration, self.address, self.port, timeout
        )

        if not self.subscribed:
            self._socket.add_observer(self._on_datagram)
        logger.debug(
            "Subscribed to %s (phoneIp=%s, phoneMac=%s)",
            self.address,
            local_ip,
            self.mac_identifier,
        )
        return response

    def unsubscribe(self) -> None:
        """Stop acknowledging notifications for this device only."""
        self._socket.remove_observer(self._on_datagram)
        logger.debug("Unsubscribed from %s", self.address)

    def add_listener(self, listener: NotificationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: NotificationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _on_datagram(self, data: bytes, addr: Address) -> None:
        if addr[0] != self.address:
            return
        try:
            notification: Notification = parse_as(
                Notification, NOTIFICATION_SHAPE, decode(data)
            )
        except (ResponseParseFailed, ResponseValidationFailed):
            return

        ack = SyncPilotAck(
            mac=self.mac_identifier, env=notification.env, id=notification.id
        )
        try:
            self._socket.send(encode(ack), self.address, self.port)
        except RequestSendError as exc:
            logger.warning("Failed to acknowledge notification from %s: %s", addr[0], exc)
        else:
            logger.debug("Acknowledged notification %s from %s", ack.id, addr[0])

        for listener in list(self._listeners):
            listener(notification)
