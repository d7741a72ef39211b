from __future__ import annotations

import asyncio
import logging

from wizlan.constants import BULB_PORT, DEFAULT_DISCOVER_WAIT
from wizlan.errors import ResponseParseFailed
from wizlan.models.commands import GetPilot
from wizlan.protocol.codec import decode, encode
from wizlan.protocol.schema import STATE_REPORT_SHAPE, validate
from wizlan.utils.network import broadcast_address, is_broadcast

from .device import Device
from .shared_socket import Address, SharedSocket

logger = logging.getLogger(__name__)


class DiscoveryProtocol(asyncio.DatagramProtocol):
    """Collects the addresses of every bulb answering the probe."""

    def __init__(self) -> None:
        self.addresses: list[str] = []

    def datagram_received(self, data: bytes, addr: Address) -> None:
        try:
            payload = decode(data)
        except ResponseParseFailed:
            logger.debug("Ignoring undecodable reply from %s", addr[0])
            return
        if not validate(STATE_REPORT_SHAPE, payload):
            logger.debug("Ignoring non state report from %s", addr[0])
            return
        if addr[0] not in self.addresses:
            logger.debug("Discovered bulb at %s", addr[0])
            self.addresses.append(addr[0])

    def error_received(self, exc: Exception) -> None:
        logger.debug("Discovery socket error: %s", exc)


async def probe(address: str, port: int, wait: float) -> list[str]:
    """Send one ``getPilot`` probe and return the distinct responding addresses.

    Uses its own throwaway socket, so it works before any device exists and
    never touches the shared listen socket.
    """
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        DiscoveryProtocol,
        local_addr=("0.0.0.0", 0),
        allow_broadcast=is_broadcast(address),
    )
    try:
        transport.sendto(encode(GetPilot()), (address, port))
        await asyncio.sleep(wait)
    finally:
        transport.close()
    return list(protocol.addresses)


async def discover(
    address: str | None = None,
    port: int = BULB_PORT,
    wait: float = DEFAULT_DISCOVER_WAIT,
    *,
    socket: SharedSocket | None = None,
) -> list[Device]:
    """Find bulbs on the local network.

    Best effort: UDP broadcast is lossy, so a bulb may be missed.

    Args:
        address: Where to send the probe. Defaults to the ``/24`` broadcast
            address of the local IP.
        port: Port the bulbs listen on
        wait: Seconds to collect replies for
        socket: Shared socket for the created devices. Defaults to the
            process-wide one.

    Returns:
        One ``Device`` per distinct responding address, in reply order
    """
    target = address or broadcast_address()
    logger.debug(
        "Discovering bulbs via %s:%d (wait=%.2fs, broadcast=%s)",
        target,
        port,
        wait,
        is_broadcast(target),
    )
    addresses = await probe(target, port, wait)
    logger.debug("Discovery complete: found %d bulbs", len(addresses))
    return [Device(ip, port=port, socket=socket) for ip in addresses]
