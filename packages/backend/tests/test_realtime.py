"""Tests for the connection registry and the notifier.

These run without the app: a FakeConnection stands in for a WebSocket
and records the frames pushed to it.
"""

import json

import pytest

from hireboard.realtime.notifier import Notifier
from hireboard.realtime.registry import ConnectionRegistry

from conftest import FakeConnection


def frames(conn: FakeConnection) -> list[dict]:
    return [json.loads(m) for m in conn.sent]


# ═══════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════


def test_registry_starts_empty():
    registry = ConnectionRegistry()
    assert len(registry) == 0
    assert registry.lookup("u1") is None
    assert registry.connections() == []


def test_register_then_lookup():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("u1", conn)
    assert registry.lookup("u1") is conn
    assert "u1" in registry
    assert registry.user_ids() == ["u1"]


def test_register_replaces_previous_handle():
    registry = ConnectionRegistry()
    first, second = FakeConnection(), FakeConnection()
    registry.register("u1", first)
    registry.register("u1", second)
    assert registry.lookup("u1") is second
    assert len(registry) == 1


def test_register_requires_user_id():
    registry = ConnectionRegistry()
    with pytest.raises(ValueError):
        registry.register("", FakeConnection())


def test_unregister_removes_mapping():
    registry = ConnectionRegistry()
    registry.register("u1", FakeConnection())
    registry.unregister("u1")
    assert registry.lookup("u1") is None
    assert "u1" not in registry


def test_unregister_unknown_is_noop():
    registry = ConnectionRegistry()
    registry.register("u1", FakeConnection())
    registry.unregister("nobody")
    assert len(registry) == 1


def test_unregister_with_stale_handle_keeps_newer_connection():
    """A closing old tab must not evict the tab that replaced it."""
    registry = ConnectionRegistry()
    old, new = FakeConnection(), FakeConnection()
    registry.register("u1", old)
    registry.register("u1", new)

    registry.unregister("u1", old)
    assert registry.lookup("u1") is new

    registry.unregister("u1", new)
    assert registry.lookup("u1") is None


def test_register_then_unregister_leaves_no_connections():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("u1", conn)
    registry.unregister("u1", conn)
    assert registry.connections() == []
    assert len(registry) == 0


def test_attach_detach_tracks_anonymous_connections():
    registry = ConnectionRegistry()
    anon = FakeConnection()
    registry.attach(anon)
    assert registry.connections() == [anon]
    assert len(registry) == 0
    registry.detach(anon)
    assert registry.connections() == []


# ═══════════════════════════════════════════════════════════
# Notifier
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_notify_online_user_gets_one_frame():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("u1", conn)
    notifier = Notifier(registry)

    notifier.notify("u1", "applicationStatusUpdate", {"status": "Reviewed"})
    await notifier.flush()

    assert frames(conn) == [
        {"type": "applicationStatusUpdate", "data": {"status": "Reviewed"}}
    ]


@pytest.mark.asyncio
async def test_notify_offline_user_is_silent():
    registry = ConnectionRegistry()
    other = FakeConnection()
    registry.register("u2", other)
    notifier = Notifier(registry)

    notifier.notify("u1", "newApplication", {"jobId": "j1"})
    await notifier.flush()

    assert other.sent == []


@pytest.mark.asyncio
async def test_notify_unknown_user_returns_none():
    notifier = Notifier(ConnectionRegistry())
    assert notifier.notify("ghost", "newApplication", {"jobId": "j1"}) is None
    await notifier.flush()


def test_notify_unknown_user_without_event_loop_returns_none():
    notifier = Notifier(ConnectionRegistry())
    assert notifier.notify("ghost", "applicationStatusUpdate", {}) is None


@pytest.mark.asyncio
async def test_notify_goes_to_latest_handle_only():
    registry = ConnectionRegistry()
    first, second = FakeConnection(), FakeConnection()
    registry.register("u1", first)
    registry.register("u1", second)
    notifier = Notifier(registry)

    notifier.notify("u1", "newApplication", {"jobId": "j1"})
    await notifier.flush()

    assert first.sent == []
    assert len(second.sent) == 1


@pytest.mark.asyncio
async def test_notify_accepts_non_string_ids():
    import uuid

    user_id = uuid.uuid4()
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register(str(user_id), conn)
    notifier = Notifier(registry)

    notifier.notify(user_id, "newApplication", {"applicationId": uuid.uuid4()})
    await notifier.flush()

    (frame,) = frames(conn)
    assert isinstance(frame["data"]["applicationId"], str)


@pytest.mark.asyncio
async def test_notify_send_failure_is_swallowed():
    registry = ConnectionRegistry()
    registry.register("u1", FakeConnection(fail=True))
    notifier = Notifier(registry)

    notifier.notify("u1", "newApplication", {})
    await notifier.flush()  # no exception


@pytest.mark.asyncio
async def test_notify_many_skips_offline_users():
    registry = ConnectionRegistry()
    a, c = FakeConnection(), FakeConnection()
    registry.register("a", a)
    registry.register("c", c)
    notifier = Notifier(registry)

    notifier.notify_many(["a", "b", "c"], "jobClosed", {"jobId": "j1"})
    await notifier.flush()

    assert frames(a) == [{"type": "jobClosed", "data": {"jobId": "j1"}}]
    assert frames(c) == [{"type": "jobClosed", "data": {"jobId": "j1"}}]


@pytest.mark.asyncio
async def test_notify_many_empty_list_sends_nothing():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("a", conn)
    notifier = Notifier(registry)

    notifier.notify_many([], "jobClosed", {})
    await notifier.flush()

    assert conn.sent == []


@pytest.mark.asyncio
async def test_broadcast_reaches_every_connection():
    registry = ConnectionRegistry()
    named, anon = FakeConnection(), FakeConnection()
    registry.attach(named)
    registry.register("u1", named)
    registry.attach(anon)
    notifier = Notifier(registry)

    notifier.broadcast("maintenance", {"at": "02:00"})
    await notifier.flush()

    assert frames(named) == [{"type": "maintenance", "data": {"at": "02:00"}}]
    assert frames(anon) == [{"type": "maintenance", "data": {"at": "02:00"}}]


@pytest.mark.asyncio
async def test_broadcast_with_no_connections_is_noop():
    notifier = Notifier(ConnectionRegistry())
    notifier.broadcast("maintenance", {})
    await notifier.flush()


def test_notify_without_event_loop_does_not_raise():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("u1", conn)
    notifier = Notifier(registry)

    notifier.notify("u1", "newApplication", {})
    assert conn.sent == []


@pytest.mark.asyncio
async def test_broadcast_skips_unregistered_user():
    registry = ConnectionRegistry()
    conn = FakeConnection()
    registry.register("u1", conn)
    registry.unregister("u1", conn)
    notifier = Notifier(registry)

    notifier.broadcast("maintenance", {"at": "02:00"})
    await notifier.flush()

    assert conn.sent == []
