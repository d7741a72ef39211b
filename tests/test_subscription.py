"""Tests for registration and syncPilot acknowledgement."""

from __future__ import annotations

import asyncio

from fakes import BULB_MAC, FakeSocket, bulb_responder, notification

from wizlan import Device
from wizlan.core import ConnectionState

BULB = "10.0.0.5"
PHONE_MAC = "0123456789ab"


def subscribed_device(**kwargs) -> tuple[Device, FakeSocket]:
    sock = FakeSocket(bulb_responder())
    device = Device(BULB, socket=sock, mac_identifier=PHONE_MAC, **kwargs)
    asyncio.run(device.subscribe("192.168.1.20"))
    return device, sock


def acks(sock: FakeSocket) -> list[dict]:
    return [message for message in sock.sent if message["method"] == "syncPilot"]


def test_subscribe_sends_registration():
    device, sock = subscribed_device()

    registration = sock.sent[0]
    assert registration["method"] == "registration"
    assert registration["params"] == {
        "register": True,
        "phoneIp": "192.168.1.20",
        "phoneMac": PHONE_MAC,
    }
    assert device.subscribed
    assert sock.state.current is ConnectionState.READY


def test_each_notification_is_acked_once():
    device, sock = subscribed_device()
    received = []
    device.on_sync(received.append)

    sock.inject(notification(id=7), BULB)

    assert acks(sock) == [
        {"method": "syncPilot", "env": "pro", "id": 7, "result": {"mac": PHONE_MAC}}
    ]
    assert sock.transport.sent[-1][1] == (BULB, 38899)
    assert [n.params.mac for n in received] == [BULB_MAC]


def test_notification_without_id_is_acked_without_id():
    device, sock = subscribed_device()

    sock.inject(notification(id=None), BULB)

    assert acks(sock) == [
        {"method": "syncPilot", "env": "pro", "result": {"mac": PHONE_MAC}}
    ]


def test_notifications_from_other_bulbs_are_ignored():
    device, sock = subscribed_device()

    sock.inject(notification(id=1), "10.0.0.6")
    sock.inject({"method": "syncPilot", "env": "pro"}, BULB)

    assert acks(sock) == []


def test_subscribe_twice_installs_one_observer():
    device, sock = subscribed_device()
    asyncio.run(device.subscribe("192.168.1.20"))

    sock.inject(notification(id=2), BULB)

    assert len(acks(sock)) == 1


def test_unsubscribe_stops_acks_and_keeps_socket_open():
    device, sock = subscribed_device()
    other = Device("10.0.0.6", socket=sock, mac_identifier="fedcba987654")
    asyncio.run(other.subscribe("192.168.1.20"))

    device.unsubscribe()
    sock.inject(notification(id=5), BULB)
    sock.inject(notification(id=6), "10.0.0.6")

    assert not device.subscribed
    assert other.subscribed
    assert acks(sock) == [
        {
            "method": "syncPilot",
            "env": "pro",
            "id": 6,
            "result": {"mac": "fedcba987654"},
        }
    ]
    assert sock.state.current is ConnectionState.READY


def test_ack_send_failure_still_notifies_listeners():
    device, sock = subscribed_device()
    received = []
    device.on_sync(received.append)

    sock.transport.send_error = OSError(101, "Network is unreachable")
    sock.inject(notification(id=9), BULB)

    assert [n.id for n in received] == [9]
    assert acks(sock) == []


def test_listener_registered_before_subscribe_runs_after_ack():
    sock = FakeSocket(bulb_responder())
    device = Device(BULB, socket=sock, mac_identifier=PHONE_MAC)
    acks_seen = []
    device.on_sync(lambda n: acks_seen.append(len(acks(sock))))

    asyncio.run(device.subscribe("192.168.1.20"))
    sock.inject(notification(id=1), BULB)
    sock.inject(notification(id=2), BULB)

    assert acks_seen == [1, 2]
    # one socket observer for the subscription, none per listener
    assert sock.observer_count == 1
