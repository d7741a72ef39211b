"""Tests for bulb discovery."""

from __future__ import annotations

import asyncio
import json

from fakes import FakeSocket, FakeTransport, state_report

from wizlan.core import Device, discover, probe


def install_fake_endpoint(monkeypatch, replies):
    """Answer the probe with ``replies``, a list of (address, payload)."""
    loop = asyncio.get_running_loop()
    calls = []

    async def create_datagram_endpoint(protocol_factory, **kwargs):
        protocol = protocol_factory()

        def respond(message, addr):
            calls.append((message, addr))
            for address, payload in replies:
                if isinstance(payload, bytes):
                    data = payload
                else:
                    data = json.dumps(payload).encode()
                loop.call_soon(protocol.datagram_received, data, (address, 38899))
            return []

        transport = FakeTransport(protocol, respond, port=54321)
        calls.append(kwargs)
        protocol.connection_made(transport)
        return transport, protocol

    monkeypatch.setattr(loop, "create_datagram_endpoint", create_datagram_endpoint)
    return calls


def test_discover_returns_one_device_per_address(monkeypatch):
    sock = FakeSocket()

    async def run():
        calls = install_fake_endpoint(
            monkeypatch,
            [
                ("192.168.1.10", state_report()),
                ("192.168.1.11", state_report()),
                ("192.168.1.10", state_report(dimming=10)),
                ("192.168.1.12", state_report()),
            ],
        )
        devices = await discover("192.168.1.255", wait=0.05, socket=sock)
        return devices, calls

    devices, calls = asyncio.run(run())

    assert [device.address for device in devices] == [
        "192.168.1.10",
        "192.168.1.11",
        "192.168.1.12",
    ]
    assert all(isinstance(device, Device) for device in devices)
    assert all(device.socket is sock for device in devices)
    assert calls[0]["allow_broadcast"] is True
    message, addr = calls[1]
    assert message == {"method": "getPilot", "params": {}}
    assert addr == ("192.168.1.255", 38899)


def test_unicast_probe_does_not_enable_broadcast(monkeypatch):
    async def run():
        calls = install_fake_endpoint(monkeypatch, [("192.168.1.10", state_report())])
        addresses = await probe("192.168.1.10", 38899, 0.05)
        return addresses, calls

    addresses, calls = asyncio.run(run())

    assert addresses == ["192.168.1.10"]
    assert calls[0]["allow_broadcast"] is False


def test_non_bulb_replies_are_ignored(monkeypatch):
    async def run():
        install_fake_endpoint(
            monkeypatch,
            [
                ("192.168.1.20", b"not json"),
                ("192.168.1.23", b"[" * 5000),
                ("192.168.1.21", {"method": "getPilot", "env": "pro"}),
                ("192.168.1.22", state_report(state="on")),
            ],
        )
        return await probe("192.168.1.255", 38899, 0.05)

    assert asyncio.run(run()) == []


def test_discover_defaults_to_local_broadcast(monkeypatch):
    monkeypatch.setattr(
        "wizlan.core.discovery.broadcast_address", lambda: "10.1.2.255"
    )
    sock = FakeSocket()

    async def run():
        calls = install_fake_endpoint(monkeypatch, [])
        devices = await discover(wait=0.01, socket=sock)
        return devices, calls

    devices, calls = asyncio.run(run())

    assert devices == []
    assert calls[1][1] == ("10.1.2.255", 38899)


def test_probe_closes_its_socket(monkeypatch):
    transports = []

    async def run():
        loop = asyncio.get_running_loop()
        install_fake_endpoint(monkeypatch, [])
        fake = loop.create_datagram_endpoint

        async def tracking(*args, **kwargs):
            transport, protocol = await fake(*args, **kwargs)
            transports.append(transport)
            return transport, protocol

        monkeypatch.setattr(loop, "create_datagram_endpoint", tracking)
        await probe("192.168.1.255", 38899, 0.01)

    asyncio.run(run())

    assert len(transports) == 1
    assert transports[0].is_closing()
