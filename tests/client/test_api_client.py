"""Tests for the async HTTP client of the notification service."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from unihub.client import NotificationApiClient, NotificationApiError


def _client(handler) -> NotificationApiClient:
    transport = httpx.MockTransport(handler)
    return NotificationApiClient(
        "http://unihub.test",
        client=httpx.AsyncClient(base_url="http://unihub.test", transport=transport),
    )


def test_create_notification_posts_wire_payload():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={
                "id": 9,
                "title": "Activity Started",
                "message": "[Proj] Cleanup: This activity is starting now.",
                "projectId": "P1",
                "recipientEmail": "p@x.com",
                "timestamp": "2025-03-01T09:00:00+08:00",
                "read": False,
            },
        )

    created = asyncio.run(
        _client(handler).create_notification(
            title="Activity Started",
            message="[Proj] Cleanup: This activity is starting now.",
            project_id="P1",
            recipient_email="p@x.com",
        )
    )

    assert seen["path"] == "/notifications"
    assert seen["body"] == {
        "title": "Activity Started",
        "message": "[Proj] Cleanup: This activity is starting now.",
        "project": "P1",
        "recipientEmail": "p@x.com",
    }
    assert created.id == 9
    assert created.activity_title == "Cleanup"
    assert created.created_at.utcoffset().total_seconds() == 8 * 3600


def test_fetch_passes_leader_scope():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=[])

    result = asyncio.run(_client(handler).fetch_notifications(leader_id="L1"))

    assert result == []
    assert seen["params"] == {"leaderId": "L1"}


def test_error_status_raises_api_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Notification not found"})

    with pytest.raises(NotificationApiError) as excinfo:
        asyncio.run(_client(handler).mark_read(1))

    assert excinfo.value.status_code == 404
    assert "Notification not found" in str(excinfo.value)


def test_online_users_and_mark_all():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/online-users":
            return httpx.Response(200, json={"userIds": ["U1", "U2"]})
        return httpx.Response(200, json={"success": True, "updated": 3})

    assert asyncio.run(_client(handler).online_users()) == {"U1", "U2"}
    assert asyncio.run(_client(handler).mark_all_read()) == 3
