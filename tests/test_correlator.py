"""Tests for matching replies to requests on the shared socket."""

from __future__ import annotations

import asyncio

import pytest
from fakes import FakeSocket, ack, state_report

from wizlan.core import ConnectionState, RequestCorrelator
from wizlan.errors import (
    BulbReturnedFailure,
    InvalidBulbState,
    RequestSendError,
    RequestTimedOut,
    ResponseParseFailed,
)
from wizlan.models import GetPilot, Pilot, SetPilot

BULB = "10.0.0.5"
PORT = 38899


async def bound_socket(responder=None) -> FakeSocket:
    sock = FakeSocket(responder)
    await sock.bind()
    return sock


def test_request_resolves_with_matching_reply():
    async def run():
        sock = await bound_socket(lambda message, addr: [state_report()])
        correlator = RequestCorrelator(sock)
        reply = await correlator.request(GetPilot(), BULB, PORT, 1.0)
        return sock, correlator, reply

    sock, correlator, reply = asyncio.run(run())

    assert reply["result"]["mac"] == state_report()["result"]["mac"]
    assert sock.sent == [{"method": "getPilot", "params": {}}]
    assert sock.transport.sent[0][1] == (BULB, PORT)
    assert sock.state.current is ConnectionState.READY
    assert sock.observer_count == 0
    assert correlator.pending is None


def test_reply_from_other_address_is_ignored():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 1.0))
        await asyncio.sleep(0)

        sock.inject(state_report(), "10.0.0.6")
        await asyncio.sleep(0)
        assert not task.done()
        assert correlator.pending is not None
        assert correlator.pending.method == "getPilot"

        sock.inject(state_report(dimming=12), BULB)
        return await task

    reply = asyncio.run(run())

    assert reply["result"]["dimming"] == 12


def test_reply_to_other_method_is_ignored():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(
            correlator.request(SetPilot(Pilot(state=False)), BULB, PORT, 1.0)
        )
        await asyncio.sleep(0)

        sock.inject(state_report(), BULB)
        await asyncio.sleep(0)
        assert not task.done()

        sock.inject(ack("setPilot"), BULB)
        return await task

    assert asyncio.run(run()) == ack("setPilot")


def test_timeout_restores_ready():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        with pytest.raises(RequestTimedOut) as excinfo:
            await correlator.request(GetPilot(), BULB, PORT, 0.01)
        assert excinfo.value.timeout == 0.01
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.READY
    assert sock.observer_count == 0


def test_pending_deadline_drives_timeout():
    async def run():
        loop = asyncio.get_running_loop()
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        started = loop.time()
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 0.05))
        await asyncio.sleep(0)
        deadline = correlator.pending.deadline
        assert started + 0.05 <= deadline <= loop.time() + 0.05

        with pytest.raises(RequestTimedOut):
            await task

    asyncio.run(run())


def test_second_request_while_awaiting_is_rejected():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        other = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 1.0))
        await asyncio.sleep(0)
        assert sock.state.current is ConnectionState.AWAITING_RESPONSE

        with pytest.raises(InvalidBulbState) as excinfo:
            await other.request(GetPilot(), "10.0.0.6", PORT, 1.0)
        assert excinfo.value.state is ConnectionState.AWAITING_RESPONSE
        assert excinfo.value.expected == [ConnectionState.READY]

        sock.inject(state_report(), BULB)
        await task
        return sock

    sock = asyncio.run(run())

    # the rejected request sent nothing
    assert len(sock.sent) == 1


def test_fire_and_forget_allowed_while_awaiting():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 1.0))
        await asyncio.sleep(0)

        message = {"method": "syncPilot", "result": {"mac": "0123456789ab"}}
        sent = await correlator.send(message, "10.0.0.6", PORT)
        assert sent is message
        assert sock.state.current is ConnectionState.AWAITING_RESPONSE

        sock.inject(state_report(), BULB)
        await task
        return sock

    sock = asyncio.run(run())

    assert [message["method"] for message in sock.sent] == ["getPilot", "syncPilot"]


@pytest.mark.parametrize("wait", [True, False])
def test_unbound_socket_is_rejected(wait):
    sock = FakeSocket()
    correlator = RequestCorrelator(sock)

    async def run():
        if wait:
            await correlator.request(GetPilot(), BULB, PORT, 1.0)
        else:
            await correlator.send(GetPilot(), BULB, PORT)

    with pytest.raises(InvalidBulbState) as excinfo:
        asyncio.run(run())

    assert excinfo.value.state is ConnectionState.IDLE


def test_closed_socket_is_rejected():
    async def run():
        sock = await bound_socket()
        sock.close()
        correlator = RequestCorrelator(sock)
        with pytest.raises(InvalidBulbState) as excinfo:
            await correlator.send(GetPilot(), BULB, PORT)
        assert excinfo.value.state is ConnectionState.CLOSED

    asyncio.run(run())


def test_invalid_json_from_target_fails_request():
    async def run():
        sock = await bound_socket(lambda message, addr: [])
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 1.0))
        await asyncio.sleep(0)
        sock.inject(b"{not json", BULB)
        with pytest.raises(ResponseParseFailed) as excinfo:
            await task
        assert excinfo.value.response == "{not json"
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.READY


def test_deeply_nested_reply_fails_request():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 1.0))
        await asyncio.sleep(0)
        sock.inject(b"[" * 5000, BULB)
        with pytest.raises(ResponseParseFailed) as excinfo:
            await task
        assert isinstance(excinfo.value.error, RecursionError)
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.READY
    assert sock.observer_count == 0


def test_error_reply_raises_bulb_returned_failure():
    error_reply = {
        "method": "setPilot",
        "env": "pro",
        "error": {"code": -32600, "message": "Invalid Request"},
    }

    async def run():
        sock = await bound_socket(lambda message, addr: [error_reply])
        correlator = RequestCorrelator(sock)
        with pytest.raises(BulbReturnedFailure) as excinfo:
            await correlator.request(SetPilot(Pilot(dimming=100)), BULB, PORT, 1.0)
        assert excinfo.value.response == error_reply
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.READY


def test_send_failure_restores_ready():
    async def run():
        sock = await bound_socket()
        sock.transport.send_error = OSError(101, "Network is unreachable")
        correlator = RequestCorrelator(sock)
        with pytest.raises(RequestSendError):
            await correlator.request(GetPilot(), BULB, PORT, 1.0)
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.READY
    assert sock.observer_count == 0


def test_close_while_pending_fails_request():
    async def run():
        sock = await bound_socket()
        correlator = RequestCorrelator(sock)
        task = asyncio.create_task(correlator.request(GetPilot(), BULB, PORT, 5.0))
        await asyncio.sleep(0)
        sock.close()
        with pytest.raises(InvalidBulbState) as excinfo:
            await task
        assert excinfo.value.state is ConnectionState.CLOSED
        return sock

    sock = asyncio.run(run())

    assert sock.state.current is ConnectionState.CLOSED
