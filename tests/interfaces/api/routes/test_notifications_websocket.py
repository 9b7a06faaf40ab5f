"""End-to-end tests for the realtime notification websocket."""

from __future__ import annotations

import asyncio

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from unihub.client import NotificationSession
from unihub.domain.entities import Viewer, ViewerRole


@pytest.fixture()
def client():
    from unihub.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def test_identify_broadcasts_presence_and_notifications(client):
    with client.websocket_connect("/notifications/ws") as watcher:
        with client.websocket_connect("/notifications/ws") as participant:
            participant.send_json(NotificationSession.identify_message("U-ws-1"))

            assert participant.receive_json() == {"type": "user:online", "data": {"userId": "U-ws-1"}}
            assert watcher.receive_json() == {"type": "user:online", "data": {"userId": "U-ws-1"}}
            assert client.get("/auth/online-users").json() == {"userIds": ["U-ws-1"]}

            created = client.post(
                "/notifications",
                json={"title": "Join request", "message": "p@x.com wants to join", "project": "P1"},
            ).json()

            event = watcher.receive_json()
            assert event["type"] == "notification:new"
            assert event["data"]["id"] == created["id"]
            assert event["data"]["projectId"] == "P1"
            assert participant.receive_json()["data"]["id"] == created["id"]

            participant.send_json({"type": "ping"})
            assert participant.receive_json() == {"type": "pong"}

        assert watcher.receive_json() == {"type": "user:offline", "data": {"userId": "U-ws-1"}}


def test_second_tab_does_not_announce_again(client):
    with client.websocket_connect("/notifications/ws") as watcher:
        with client.websocket_connect("/notifications/ws") as first_tab:
            first_tab.send_json(NotificationSession.identify_message("U-ws-2"))
            assert watcher.receive_json()["type"] == "user:online"

            with client.websocket_connect("/notifications/ws") as second_tab:
                second_tab.send_json(NotificationSession.identify_message("U-ws-2"))
                second_tab.send_json({"type": "ping"})
                assert second_tab.receive_json() == {"type": "pong"}

            watcher.send_json({"type": "ping"})
            assert watcher.receive_json() == {"type": "pong"}

        assert watcher.receive_json() == {"type": "user:offline", "data": {"userId": "U-ws-2"}}


def test_end_to_end_join_flow_reaches_participant_session(client):
    """A participant session consumes the live approval and keeps its feed deduplicated."""

    session = NotificationSession(Viewer(role=ViewerRole.PARTICIPANT, email="p@x.com"))

    with client.websocket_connect("/notifications/ws") as socket:
        client.post(
            "/notifications",
            json={"title": "Join request", "message": "p@x.com wants to join", "project": "P1"},
        )
        join_event = socket.receive_json()
        client.post(
            "/notifications",
            json={
                "title": "Join request approved",
                "message": 'p@x.com - Your request to join "Proj" was approved.',
                "project": "P1",
                "recipientEmail": "p@x.com",
            },
        )
        approval_event = socket.receive_json()

    async def consume():
        session.handle_event(join_event)
        session.handle_event(approval_event)
        session.handle_event(approval_event)
        session.close()

    asyncio.run(consume())

    assert [item.title for item in session.notifications] == ["Join request approved"]
    assert session.unread_count == 1
    assert client.get("/notifications/pending-join-requests").json() == []
