from __future__ import annotations

import ipaddress
import logging
import random
import socket

logger = logging.getLogger(__name__)

MAC_CHARACTERS = "0123456789abcdef"


def random_mac() -> str:
    """Return 12 random lowercase hex digits, used as our ``phoneMac``."""
    return "".join(random.choice(MAC_CHARACTERS) for _ in range(12))


def detect_local_ip() -> str:
    """Return the IPv4 address of the interface used for the default route."""
    try:
        # no packet is sent, connect() only selects a route
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            local_ip = sock.getsockname()[0]
        logger.debug("Detected local IP: %s", local_ip)
        return local_ip
    except OSError as exc:
        raise RuntimeError("Could not detect local IP address") from exc


def broadcast_address(local_ip: str | None = None) -> str:
    """Return the ``/24`` broadcast address of ``local_ip`` (detected if omitted)."""
    ip = local_ip or detect_local_ip()
    network = ipaddress.ip_network(f"{ip}/24", strict=False)
    return str(network.broadcast_address)


def is_broadcast(address: str) -> bool:
    return address.rsplit(".", 1)[-1] == "255"
