"""Mock bulb for development and testing."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from wizlan.constants import BULB_PORT, LISTEN_PORT

logger = logging.getLogger(__name__)

ENV = "pro"


@dataclass
class MockBulb(asyncio.DatagramProtocol):
    """UDP server answering like a bulb.

    Answers ``getPilot``, applies ``setPilot`` and, after a ``registration``,
    pushes ``syncPilot`` notifications to ``(phoneIp, notify_port)`` every
    ``sync_interval`` seconds. A subscriber that leaves ``max_missed_acks``
    pushes in a row unacknowledged is dropped.
    """

    host: str = "0.0.0.0"
    port: int = BULB_PORT
    mac: str = "a8bb50000001"
    notify_port: int = LISTEN_PORT
    sync_interval: float = 5.0
    max_missed_acks: int = 3

    state: bool = True
    scene_id: int = 0
    dimming: int = 100
    temp: int | None = 2700
    rgb: tuple[int, int, int] | None = None
    speed: int | None = None
    rssi: int = -55

    received: list[dict[str, Any]] = field(default_factory=list, repr=False)
    subscriber: tuple[str, str] | None = None
    acks_received: int = 0
    _missed_acks: int = field(default=0, repr=False)
    _sync_id: int = field(default=0, repr=False)
    _transport: asyncio.DatagramTransport | None = field(default=None, repr=False)
    _sync_task: asyncio.Task[None] | None = field(default=None, repr=False)

    async def start(self) -> None:
        """Start the mock bulb server."""
        loop = asyncio.get_running_loop()
        await loop.create_datagram_endpoint(
            lambda: self, local_addr=(self.host, self.port)
        )
        logger.info("Mock bulb %s listening on port %d", self.mac, self.bound_port)

    async def stop(self) -> None:
        """Stop the mock bulb server."""
        if self._sync_task is not None:
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
            self._sync_task = None
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            logger.info("Mock bulb %s stopped", self.mac)

    async def run_forever(self) -> None:
        """Run the server until cancelled."""
        await self.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.stop()

    @property
    def bound_port(self) -> int:
        if self._transport is None:
            return self.port
        return self._transport.get_extra_info("sockname")[1]

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        try:
            message = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            logger.debug("Ignoring undecodable datagram from %s", addr)
            return
        if not isinstance(message, dict):
            return

        self.received.append(message)
        method = message.get("method")
        logger.debug("Received %s from %s", method, addr)

        if method == "getPilot":
            self._reply(addr, {"method": "getPilot", "env": ENV, "result": self.pilot()})
        elif method == "setPilot":
            self._apply(message.get("params") or {})
            self._reply(addr, {"method": "setPilot", "env": ENV, "result": {"success": True}})
        elif method == "registration":
            self._register(message, addr)
        elif method == "syncPilot" and "result" in message:
            self.acks_received += 1
            self._missed_acks = 0
        else:
            self._reply(
                addr,
                {
                    "method": method,
                    "env": ENV,
                    "error": {"code": -32601, "message": "Method not found"},
                },
            )

    def pilot(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "mac": self.mac,
            "rssi": self.rssi,
            "src": "",
            "state": self.state,
            "sceneId": self.scene_id,
            "dimming": self.dimming,
        }
        if self.temp is not None:
            result["temp"] = self.temp
        if self.rgb is not None:
            result["r"], result["g"], result["b"] = self.rgb
        if self.speed is not None:
            result["speed"] = self.speed
        return result

    def _apply(self, params: dict[str, Any]) -> None:
        if "state" in params:
            self.state = bool(params["state"])
        if "dimming" in params:
            self.dimming = params["dimming"]
        if "temp" in params:
            self.temp, self.rgb, self.scene_id = params["temp"], None, 0
        if {"r", "g", "b"} & params.keys():
            self.rgb = (params.get("r", 0), params.get("g", 0), params.get("b", 0))
            self.temp, self.scene_id = None, 0
        if "sceneId" in params:
            self.scene_id = params["sceneId"]
        if "speed" in params:
            self.speed = params["speed"]
        logger.info("Mock bulb state changed: %s", self.pilot())

    def _register(self, message: dict[str, Any], addr: tuple[str, int]) -> None:
        params = message.get("params") or {}
        self._reply(
            addr,
            {
                "method": "registration",
                "id": message.get("id"),
                "env": ENV,
                "result": {"mac": self.mac, "success": True},
            },
        )
        if not params.get("register", True):
            self.subscriber = None
            return

        self.subscriber = (params.get("phoneIp", addr[0]), params.get("phoneMac", ""))
        self._missed_acks = 0
        if self._sync_task is None or self._sync_task.done():
            self._sync_task = asyncio.get_running_loop().create_task(self._push_syncs())

    def push_sync(self) -> None:
        """Send one ``syncPilot`` notification to the subscriber."""
        if self.subscriber is None:
            return
        self._sync_id += 1
        params = {**self.pilot(), "src": "udp", "mqttCd": 0, "ts": self._sync_id}
        self._reply(
            (self.subscriber[0], self.notify_port),
            {"method": "syncPilot", "id": self._sync_id, "env": ENV, "params": params},
        )
        self._missed_acks += 1

    async def _push_syncs(self) -> None:
        while self.subscriber is not None:
            await asyncio.sleep(self.sync_interval)
            if self._missed_acks >= self.max_missed_acks:
                logger.info("Dropping subscriber %s after missed acks", self.subscriber)
                self.subscriber = None
                return
            self.push_sync()

    def _reply(self, addr: tuple[str, int], message: dict[str, Any]) -> None:
        if self._transport is None:
            return
        self._transport.sendto(json.dumps(message).encode("utf-8"), addr)


async def run_mock_bulb(
    port: int = BULB_PORT,
    mac: str = "a8bb50000001",
    notify_port: int = LISTEN_PORT,
    sync_interval: float = 5.0,
) -> None:
    """Run a mock bulb server."""
    bulb = MockBulb(
        port=port, mac=mac, notify_port=notify_port, sync_interval=sync_interval
    )
    await bulb.run_forever()
