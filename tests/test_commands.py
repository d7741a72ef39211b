from __future__ import annotations

import pytest

from wizlan.errors import ArgumentOutOfRange, ErrorCode
from wizlan.models import GetPilot, Pilot, Registration, SetPilot, SyncPilotAck


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("dimming", 0),
        ("dimming", 101),
        ("temp", 999),
        ("temp", 10_001),
        ("r", -1),
        ("g", 256),
        ("b", 300),
        ("c", -5),
        ("w", 256),
        ("scene_id", 0),
        ("scene_id", 33),
        ("speed", 0),
        ("speed", 101),
    ],
)
def test_pilot_rejects_out_of_range(field, value):
    with pytest.raises(ArgumentOutOfRange) as excinfo:
        Pilot(**{field: value})

    error = excinfo.value
    assert error.code is ErrorCode.ARGUMENT_OUT_OF_RANGE
    assert error.provided == value
    assert error.data["provided"] == value
    assert error.lower <= error.upper


@pytest.mark.parametrize(
    ("field", "value"),
    [("r", 10.5), ("dimming", 50.0), ("dimming", True), ("temp", "2700")],
)
def test_pilot_rejects_non_integers(field, value):
    with pytest.raises(ArgumentOutOfRange) as excinfo:
        Pilot(**{field: value})

    assert excinfo.value.argument == field
    assert excinfo.value.provided == value


def test_pilot_scene_error_uses_wire_name():
    with pytest.raises(ArgumentOutOfRange) as excinfo:
        Pilot(scene_id=40)

    assert excinfo.value.argument == "sceneId"
    assert (excinfo.value.lower, excinfo.value.upper) == (1, 32)


def test_pilot_state_must_be_bool():
    with pytest.raises(ValueError):
        Pilot(state="on")


def test_pilot_range_error_is_a_value_error():
    with pytest.raises(ValueError):
        Pilot(dimming=500)


def test_pilot_accepts_limits():
    pilot = Pilot(dimming=1, temp=10_000, r=0, g=255, scene_id=32, speed=100)
    assert pilot.to_params() == {
        "sceneId": 32,
        "speed": 100,
        "dimming": 1,
        "temp": 10_000,
        "r": 0,
        "g": 255,
    }


def test_pilot_only_sends_set_fields():
    assert Pilot().to_params() == {}
    assert Pilot(state=False).to_params() == {"state": False}


def test_get_and_set_pilot_messages():
    assert GetPilot().to_dict() == {"method": "getPilot", "params": {}}
    assert SetPilot(Pilot(state=True)).to_dict() == {
        "method": "setPilot",
        "params": {"state": True},
    }


def test_registration_message():
    message = Registration(phone_ip="192.168.1.20", phone_mac="0123456789ab").to_dict()

    assert message["method"] == "registration"
    assert message["version"] == 1
    assert 1 <= message["id"] <= 10_000
    assert message["params"] == {
        "register": True,
        "phoneIp": "192.168.1.20",
        "phoneMac": "0123456789ab",
    }


def test_sync_pilot_ack_omits_missing_id():
    assert SyncPilotAck(mac="0123456789ab", env="pro").to_dict() == {
        "method": "syncPilot",
        "env": "pro",
        "result": {"mac": "0123456789ab"},
    }
    assert SyncPilotAck(mac="0123456789ab", env="pro", id=12).to_dict()["id"] == 12
