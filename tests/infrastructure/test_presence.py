"""Tests for the online user registry."""

from __future__ import annotations

import logging

from unihub.infrastructure.notifications import PresenceRegistry


class RecordingBroadcaster:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def broadcast(self, event_type, payload) -> None:
        self.events.append((event_type, payload))


def test_user_online_while_any_connection_is_identified():
    broadcaster = RecordingBroadcaster()
    registry = PresenceRegistry(broadcaster)

    assert registry.identify("c1", "U1") is True
    assert registry.identify("c2", "U1") is False
    assert registry.disconnect("c1") is False
    assert registry.list_online() == {"U1"}
    assert registry.disconnect("c2") is True

    assert registry.list_online() == set()
    assert broadcaster.events == [
        ("user:online", {"userId": "U1"}),
        ("user:offline", {"userId": "U1"}),
    ]


def test_duplicate_identify_does_not_inflate_count(caplog):
    registry = PresenceRegistry(RecordingBroadcaster())

    with caplog.at_level(logging.DEBUG):
        registry.identify("c1", "U1")
        registry.identify("c1", "U1")

    assert registry.connection_count("U1") == 1
    assert "identified twice" in caplog.text
    assert registry.disconnect("c1") is True


def test_reidentify_moves_connection_to_new_user():
    broadcaster = RecordingBroadcaster()
    registry = PresenceRegistry(broadcaster)

    registry.identify("c1", "U1")
    registry.identify("c1", "U2")

    assert registry.list_online() == {"U2"}
    assert [event for event, _ in broadcaster.events] == [
        "user:online",
        "user:offline",
        "user:online",
    ]


def test_anonymous_connections_are_ignored():
    broadcaster = RecordingBroadcaster()
    registry = PresenceRegistry(broadcaster)

    assert registry.identify("c1", "") is False
    assert registry.disconnect("c1") is False
    assert registry.disconnect("never-seen") is False
    assert broadcaster.events == []


def test_interleaved_connections_of_several_users():
    registry = PresenceRegistry(RecordingBroadcaster())
    for index in range(3):
        registry.identify(f"a{index}", "A")
        registry.identify(f"b{index}", "B")
    for index in range(3):
        registry.disconnect(f"a{index}")

    assert registry.list_online() == {"B"}
    assert registry.connection_count("B") == 3
    assert registry.connection_count("A") == 0
