import uuid

import pytest

from seva_manager import realtime, socket_handlers
from seva_manager.models.enums import ChangeEvent, PaymentStatus
from seva_manager.socket_handlers import sid_profile_map
from seva_manager.socket_instance import sio


def test_subscription_rooms():
    assert realtime.subscription_room("sevas") == "changes:sevas"
    seva_id = uuid.uuid4()
    assert realtime.subscription_room("donors", {"seva_id": seva_id}) == f"changes:donors:seva_id={seva_id}"


@pytest.mark.parametrize(
    "table, filter_",
    [
        ("secrets", None),
        ("donors", {"donor_name": "x"}),
        ("donors", {"seva_id": "a", "added_by": "b"}),
    ],
)
def test_invalid_subscriptions(table, filter_):
    with pytest.raises(ValueError):
        realtime.subscription_room(table, filter_)


def test_rooms_for_change_include_matching_filters():
    seva_id, owner = uuid.uuid4(), uuid.uuid4()
    rooms = realtime.rooms_for_change("donors", {"id": uuid.uuid4(), "seva_id": seva_id, "added_by": owner})
    assert rooms == [
        "changes:donors",
        f"changes:donors:seva_id={seva_id}",
        f"changes:donors:added_by={owner}",
    ]


async def test_broadcast_change_payload(emitted):
    seva_id = uuid.uuid4()
    await realtime.broadcast_change("sevas", ChangeEvent.UPDATE, {"id": seva_id, "booked_slots": 3})

    event, payload, rooms = emitted[-1]
    assert event == "db_change"
    assert payload == {"table": "sevas", "event": "UPDATE", "record": {"id": str(seva_id), "booked_slots": 3}}
    assert rooms == ["changes:sevas", f"changes:sevas:id={seva_id}"]


async def test_broadcast_failures_are_swallowed(monkeypatch):
    async def broken_emit(*args, **kwargs):
        raise RuntimeError("socket layer down")

    monkeypatch.setattr(sio, "emit", broken_emit)
    await realtime.broadcast_change("sevas", ChangeEvent.DELETE, {"id": uuid.uuid4()})


@pytest.fixture
def rooms(monkeypatch, session_factory):
    """Records room joins and leaves; handler lookups go to the test database."""
    joined, left = [], []

    async def fake_enter_room(sid, room, namespace=None):
        joined.append((sid, room))

    async def fake_leave_room(sid, room, namespace=None):
        left.append((sid, room))

    monkeypatch.setattr(sio, "enter_room", fake_enter_room)
    monkeypatch.setattr(sio, "leave_room", fake_leave_room)
    monkeypatch.setattr(socket_handlers, "AsyncSessionLocal", session_factory)
    return joined, left


def _subscribe(sid, table, filter_=None):
    payload = {"table": table}
    if filter_ is not None:
        payload["filter"] = filter_
    return sio.handlers["/"]["subscribe"](sid, payload)


async def test_subscribe_handler_joins_room(rooms, monkeypatch, user, make_seva, make_donor):
    joined, left = rooms
    seva = await make_seva()
    donor = await make_donor(seva, user)
    monkeypatch.setitem(sid_profile_map, "sid-1", user.id)

    result = await _subscribe("sid-1", "payment_history", {"donor_id": str(donor.id)})
    assert result == {"ok": True, "room": f"changes:payment_history:donor_id={donor.id}"}
    assert joined == [("sid-1", result["room"])]

    rejected = await _subscribe("sid-1", "nope")
    assert rejected["ok"] is False

    await sio.handlers["/"]["unsubscribe"]("sid-1", {"table": "payment_history", "filter": {"donor_id": str(donor.id)}})
    assert left == [("sid-1", result["room"])]


async def test_users_follow_only_their_own_donors(rooms, monkeypatch, user, make_profile, make_seva, make_donor):
    joined, _ = rooms
    other = await make_profile(full_name="Other Volunteer")
    seva = await make_seva()
    others_donor = await make_donor(seva, other, "5000", "2500", PaymentStatus.PARTIAL)
    monkeypatch.setitem(sid_profile_map, "sid-user", user.id)

    denied = [
        await _subscribe("sid-user", "donors"),
        await _subscribe("sid-user", "donors", {"added_by": str(other.id)}),
        await _subscribe("sid-user", "donors", {"seva_id": str(seva.id)}),
        await _subscribe("sid-user", "payment_history"),
        await _subscribe("sid-user", "payment_history", {"donor_id": str(others_donor.id)}),
        await _subscribe("sid-user", "payment_history", {"donor_id": str(uuid.uuid4())}),
        await _subscribe("sid-user", "profiles"),
        await _subscribe("sid-user", "profiles", {"referred_by": str(other.id)}),
    ]
    assert all(result["ok"] is False for result in denied)
    assert joined == []

    own = await _subscribe("sid-user", "donors", {"added_by": str(user.id)})
    assert own == {"ok": True, "room": f"changes:donors:added_by={user.id}"}
    referrals = await _subscribe("sid-user", "profiles", {"referred_by": str(user.id)})
    assert referrals["ok"] is True
    sevas = await _subscribe("sid-user", "sevas")
    assert sevas == {"ok": True, "room": "changes:sevas"}
    assert [room for _, room in joined] == [own["room"], referrals["room"], "changes:sevas"]


async def test_admins_follow_every_donor(rooms, monkeypatch, admin, make_profile, make_seva, make_donor):
    joined, _ = rooms
    other = await make_profile(full_name="Other Volunteer")
    donor = await make_donor(await make_seva(), other)
    monkeypatch.setitem(sid_profile_map, "sid-admin", admin.id)

    for table, filter_ in [
        ("donors", None),
        ("donors", {"added_by": str(other.id)}),
        ("payment_history", None),
        ("payment_history", {"donor_id": str(donor.id)}),
        ("profiles", None),
    ]:
        result = await _subscribe("sid-admin", table, filter_)
        assert result["ok"] is True, (table, filter_)
    assert len(joined) == 5


async def test_subscribe_for_deleted_profile_is_denied(rooms, monkeypatch):
    joined, _ = rooms
    monkeypatch.setitem(sid_profile_map, "sid-gone", uuid.uuid4())
    result = await _subscribe("sid-gone", "sevas")
    assert result == {"ok": False, "error": "Profile not found"}
    assert joined == []



async def test_subscribe_requires_connection():
    result = await sio.handlers["/"]["subscribe"]("unknown-sid", {"table": "sevas"})
    assert result["ok"] is False
