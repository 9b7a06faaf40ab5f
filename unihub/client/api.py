"""HTTP client for the notification endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

import httpx

from unihub.domain.entities import Notification
from unihub.domain.message_fields import with_structured_fields

logger = logging.getLogger(__name__)


class NotificationApiError(RuntimeError):
    """Raised when the notification service answers with an error status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable notification timestamp %r", value)
        return None


def notification_from_payload(payload: Mapping[str, Any]) -> Notification:
    """Build a :class:`Notification` from its wire representation."""

    raw_id = payload.get("id")
    project_id = payload.get("projectId", payload.get("project"))
    return with_structured_fields(
        Notification(
            id=int(raw_id) if raw_id is not None else None,
            title=str(payload.get("title") or ""),
            message=str(payload.get("message") or ""),
            project_id=str(project_id) if project_id is not None else None,
            recipient_email=payload.get("recipientEmail"),
            read=bool(payload.get("read", False)),
            created_at=_parse_timestamp(payload.get("timestamp")),
        )
    )


class NotificationApiClient:
    """Thin async wrapper over the REST surface of the notification service."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise NotificationApiError(f"{method} {url} failed: {exc}") from exc

        if response.is_success:
            return response.json()

        try:
            detail = response.json().get("detail", response.text)
        except ValueError:
            detail = response.text
        raise NotificationApiError(
            f"{method} {url} returned {response.status_code}: {detail}",
            status_code=response.status_code,
        )

    async def fetch_notifications(
        self,
        *,
        leader_id: str | None = None,
        leader_email: str | None = None,
    ) -> list[Notification]:
        params = {
            key: value
            for key, value in (("leaderId", leader_id), ("leaderEmail", leader_email))
            if value
        }
        payload = await self._request("GET", "/notifications", params=params)
        return [notification_from_payload(item) for item in payload or []]

    async def create_notification(
        self,
        *,
        title: str,
        message: str,
        project_id: str | None = None,
        recipient_email: str | None = None,
    ) -> Notification:
        body: dict[str, Any] = {"title": title, "message": message}
        if project_id is not None:
            body["project"] = project_id
        if recipient_email is not None:
            body["recipientEmail"] = recipient_email
        payload = await self._request("POST", "/notifications", json=body)
        return notification_from_payload(payload)

    async def mark_read(self, notification_id: int) -> Notification:
        payload = await self._request("PATCH", f"/notifications/{notification_id}/read")
        return notification_from_payload(payload)

    async def mark_all_read(
        self,
        *,
        leader_id: str | None = None,
        leader_email: str | None = None,
    ) -> int:
        params = {
            key: value
            for key, value in (("leaderId", leader_id), ("leaderEmail", leader_email))
            if value
        }
        payload = await self._request("POST", "/notifications/mark-read-all", params=params)
        return int(payload.get("updated", 0))

    async def online_users(self) -> set[str]:
        payload = await self._request("GET", "/auth/online-users")
        return set(payload.get("userIds", []))


__all__ = ["NotificationApiClient", "NotificationApiError", "notification_from_payload"]
