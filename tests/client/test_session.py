"""Tests for the client side notification session."""

from __future__ import annotations

import asyncio
import logging

from unihub.client import (
    NotificationApiError,
    NotificationSession,
    ToastState,
    notification_from_payload,
)
from unihub.domain.entities import Viewer, ViewerRole

ADMIN = Viewer(role=ViewerRole.ADMIN)
PARTICIPANT = Viewer(role=ViewerRole.PARTICIPANT, email="p@x.com", user_id="U1")
LEADER = Viewer(role=ViewerRole.LEADER, email="leader@x.com", user_id="L1", project_ids=frozenset({"P1"}))


def _payload(notification_id: int, title: str, message: str, **extra) -> dict:
    return {
        "id": notification_id,
        "title": title,
        "message": message,
        "projectId": extra.get("projectId", "P1"),
        "recipientEmail": extra.get("recipientEmail"),
        "timestamp": extra.get("timestamp", f"2025-03-01T09:{notification_id:02d}:00+08:00"),
        "read": extra.get("read", False),
    }


class FakeApi:
    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[tuple] = []
        self._fail = fail

    async def mark_read(self, notification_id):
        self.calls.append(("mark_read", notification_id))
        if self._fail:
            raise NotificationApiError("server down")

    async def mark_all_read(self, **params):
        self.calls.append(("mark_all_read", params))
        return 0


def test_hydrate_sorts_filters_and_never_toasts():
    session = NotificationSession(ADMIN)

    session.hydrate(
        [
            _payload(1, "Join request", "p@x.com wants to join"),
            _payload(3, "Project approved", "Admin approved your project"),
            _payload(2, "New project created", "leader@x.com created new project", read=True),
        ]
    )

    assert [item.id for item in session.notifications] == [2, 1]
    assert session.unread_count == 1
    assert session.toast is None
    assert session.on_broadcast(_payload(3, "Project approved", "Admin approved your project")) is False


def test_redelivered_broadcast_is_ignored():
    async def scenario():
        session = NotificationSession(ADMIN)
        payload = _payload(5, "Join request", "p@x.com wants to join")
        added = [session.on_broadcast(payload) for _ in range(3)]
        session.close()
        return session, added

    session, added = asyncio.run(scenario())

    assert added == [True, False, False]
    assert len(session.notifications) == 1
    assert session.unread_count == 1


def test_irrelevant_broadcast_is_dropped_for_participant():
    async def scenario():
        session = NotificationSession(PARTICIPANT)
        session.on_broadcast(_payload(1, "Join request", "p@x.com wants to join"))
        session.on_broadcast(
            _payload(2, "Join request approved", 'q@x.com - Your request to join "Proj" was approved.')
        )
        return session

    session = asyncio.run(scenario())

    assert session.notifications == []
    assert session.toast_state is ToastState.HIDDEN


def test_toast_state_machine_and_replacement():
    async def scenario():
        session = NotificationSession(ADMIN, toast_delay=0.05, exit_delay=0.1)
        states = []
        session.on_broadcast(_payload(1, "Join request", "p@x.com wants to join"))
        states.append((session.toast_state, session.toast.id))
        session.on_broadcast(_payload(2, "Join request", "q@x.com wants to join"))
        states.append((session.toast_state, session.toast.id))
        await asyncio.sleep(0.07)
        states.append((session.toast_state, session.toast.id))
        await asyncio.sleep(0.15)
        states.append((session.toast_state, session.toast))
        return states

    states = asyncio.run(scenario())

    assert states == [
        (ToastState.VISIBLE, 1),
        (ToastState.VISIBLE, 2),
        (ToastState.HIDING, 2),
        (ToastState.HIDDEN, None),
    ]


def test_close_cancels_pending_toast_timer():
    async def scenario():
        session = NotificationSession(ADMIN, toast_delay=0.01, exit_delay=0.01)
        session.on_broadcast(_payload(1, "Join request", "p@x.com wants to join"))
        session.close()
        await asyncio.sleep(0.05)
        return session

    session = asyncio.run(scenario())

    assert session.toast_state is ToastState.HIDDEN
    assert session.toast is None


def test_presence_events_update_online_users():
    session = NotificationSession(ADMIN)

    session.handle_event({"type": "user:online", "data": {"userId": "U1"}})
    session.handle_event({"type": "user:online", "data": {"userId": "U2"}})
    session.handle_event({"type": "user:offline", "data": {"userId": "U1"}})
    session.handle_event({"type": "unknown", "data": {}})

    assert session.online_users == {"U2"}
    assert NotificationSession.identify_message("U9") == {"type": "identify", "data": {"userId": "U9"}}


def test_mark_read_is_optimistic_and_logs_failures(caplog):
    api = FakeApi(fail=True)

    async def scenario():
        session = NotificationSession(PARTICIPANT, api=api)
        session.hydrate([_payload(1, "Join request approved", 'p@x.com - Your request to join "Proj" was approved.')])
        session.mark_read(1)
        await session.flush()
        return session

    with caplog.at_level(logging.WARNING):
        session = asyncio.run(scenario())

    assert session.unread_count == 0
    assert session.notifications[0].read is True
    assert api.calls == [("mark_read", 1)]
    assert "server down" in caplog.text


def test_mark_all_read_and_clear():
    api = FakeApi()

    async def scenario():
        session = NotificationSession(
            LEADER, api=api
        )
        session.hydrate(
            [
                _payload(1, "Join request", "p@x.com wants to join"),
                _payload(2, "Activity join", 'p@x.com joined activity "Cleanup" of project "Proj"'),
            ]
        )
        session.mark_all_read()
        await session.flush()
        unread = session.unread_count
        session.clear()
        return session, unread

    session, unread = asyncio.run(scenario())

    assert unread == 0
    assert session.notifications == []
    assert api.calls == [("mark_all_read", {"leader_id": "L1", "leader_email": "leader@x.com"})]


def test_leader_ignores_broadcasts_for_projects_it_does_not_own():
    async def scenario():
        session = NotificationSession(LEADER)
        session.hydrate([])
        foreign = session.on_broadcast(_payload(7, "Join request", "z@x.com wants to join", projectId="P9"))
        owned = session.on_broadcast(_payload(8, "Join request", "p@x.com wants to join"))
        toast_id = session.toast.id
        session.close()
        return session, foreign, owned, toast_id

    session, foreign, owned, toast_id = asyncio.run(scenario())

    assert (foreign, owned) == (False, True)
    assert [item.id for item in session.notifications] == [8]
    assert toast_id == 8


class SnapshotApi:
    def __init__(self, payloads: list[dict]) -> None:
        self.payloads = payloads
        self.params: list[dict] = []

    async def fetch_notifications(self, **params):
        self.params.append(params)
        return [notification_from_payload(item) for item in self.payloads]


def test_leader_refresh_learns_projects_from_scoped_snapshot():
    api = SnapshotApi(
        [
            _payload(1, "Join request", "p@x.com wants to join", projectId="P2"),
            _payload(2, "Note", "For the leader", projectId="P9", recipientEmail="leader@x.com"),
        ]
    )

    async def scenario():
        session = NotificationSession(
            Viewer(role=ViewerRole.LEADER, email="leader@x.com", user_id="L1"), api=api
        )
        await session.refresh()
        owned = session.on_broadcast(_payload(3, "Join request", "q@x.com wants to join", projectId="P2"))
        foreign = session.on_broadcast(_payload(4, "Join request", "z@x.com wants to join", projectId="P9"))
        session.close()
        return session, owned, foreign

    session, owned, foreign = asyncio.run(scenario())

    assert api.params == [{"leader_id": "L1", "leader_email": "leader@x.com"}]
    assert session.viewer.project_ids == frozenset({"P2"})
    assert [item.id for item in session.notifications] == [3, 2, 1]
    assert (owned, foreign) == (True, False)


def test_participant_receives_evaluation_prompt_addressed_to_them():
    async def scenario():
        session = NotificationSession(PARTICIPANT)
        added = session.on_broadcast(
            _payload(
                1,
                "Activity Evaluation",
                "[Proj] Cleanup: Please complete the evaluation form for this activity.",
                recipientEmail="p@x.com",
            )
        )
        toast_title = session.toast.title
        ignored = session.on_broadcast(
            _payload(
                2,
                "Activity Evaluation",
                "[Proj] Cleanup: Please complete the evaluation form for this activity.",
                recipientEmail="q@x.com",
            )
        )
        session.close()
        return session, added, ignored, toast_title

    session, added, ignored, toast_title = asyncio.run(scenario())

    assert (added, ignored) == (True, False)
    assert toast_title == "Activity Evaluation"
    assert [item.id for item in session.notifications] == [1]


def test_dismiss_toast_starts_the_exit_transition():
    async def scenario():
        session = NotificationSession(ADMIN, toast_delay=10.0, exit_delay=0.02)
        session.on_broadcast(_payload(1, "Join request", "p@x.com wants to join"))
        session.dismiss_toast()
        hiding = session.toast_state
        await asyncio.sleep(0.06)
        return hiding, session.toast_state, session.toast

    assert asyncio.run(scenario()) == (ToastState.HIDING, ToastState.HIDDEN, None)


def test_rehydrating_keeps_previously_seen_ids():
    async def scenario():
        session = NotificationSession(ADMIN)
        session.on_broadcast(_payload(9, "Join request", "p@x.com wants to join"))
        session.close()
        session.hydrate([_payload(1, "Join request", "q@x.com wants to join")])
        redelivered = session.on_broadcast(_payload(9, "Join request", "p@x.com wants to join"))
        return session, redelivered

    session, redelivered = asyncio.run(scenario())

    assert redelivered is False
    assert session.toast is None
    assert [item.id for item in session.notifications] == [1]
