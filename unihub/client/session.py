"""Client side view of the notification feed for a single viewer."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Iterable, Mapping
from enum import Enum
from typing import Any

from unihub.domain.entities import Notification, Viewer, ViewerRole
from unihub.domain.notification_rules import is_relevant_to, is_toast_eligible
from unihub.infrastructure.notifications import (
    NOTIFICATION_EVENT,
    USER_OFFLINE_EVENT,
    USER_ONLINE_EVENT,
)

from .api import NotificationApiClient, notification_from_payload

logger = logging.getLogger(__name__)

IDENTIFY_MESSAGE_TYPE = "identify"


class ToastState(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"
    HIDING = "hiding"


def _newest_first(notification: Notification) -> tuple[float, int]:
    created_at = notification.created_at
    return (created_at.timestamp() if created_at else 0.0, notification.id or 0)


class NotificationSession:
    """Keep a deduplicated, classifier filtered feed and its toast surface.

    Timers run on the event loop that delivers broadcasts, so the session
    must be driven from inside a running loop.
    """

    def __init__(
        self,
        viewer: Viewer,
        api: NotificationApiClient | None = None,
        *,
        toast_delay: float = 5.0,
        exit_delay: float = 0.4,
    ) -> None:
        self.viewer = viewer
        self._api = api
        self.toast_delay = toast_delay
        self.exit_delay = exit_delay
        self.notifications: list[Notification] = []
        self.online_users: set[str] = set()
        self.toast: Notification | None = None
        self.toast_state = ToastState.HIDDEN
        self._seen: set[int] = set()
        self._toast_timer: asyncio.TimerHandle | None = None
        self._calls: set[asyncio.Task[Any]] = set()

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self.notifications if not item.read)

    def _audience_params(self) -> dict[str, str | None]:
        if self.viewer.role is ViewerRole.LEADER:
            return {"leader_id": self.viewer.user_id, "leader_email": self.viewer.email}
        if self.viewer.role is ViewerRole.PARTICIPANT:
            return {"leader_email": self.viewer.email}
        return {}

    def hydrate(self, items: Iterable[Notification | Mapping[str, Any]]) -> None:
        """Replace the local feed with ``items`` without raising any toast."""

        notifications = [self._coerce(item) for item in items]
        self.notifications = sorted(
            (item for item in notifications if is_relevant_to(item, self.viewer)),
            key=_newest_first,
            reverse=True,
        )
        self._seen.update(item.id for item in notifications if item.id is not None)

    async def refresh(self) -> None:
        """Fetch the feed from the server and hydrate the session with it."""

        if self._api is None:
            return
        if self.viewer.role is not ViewerRole.LEADER:
            self.hydrate(await self._api.fetch_notifications())
            return
        snapshot = await self._api.fetch_notifications(
            leader_id=self.viewer.user_id, leader_email=self.viewer.email
        )
        self._widen_leader_scope(snapshot)
        self.hydrate(snapshot)

    def on_broadcast(self, payload: Notification | Mapping[str, Any]) -> bool:
        """Consume a live notification; returns ``True`` when it was added."""

        notification = self._coerce(payload)
        if notification.id is None or notification.id in self._seen:
            return False
        self._seen.add(notification.id)
        if not is_relevant_to(notification, self.viewer):
            return False

        self.notifications.insert(0, notification)
        if is_toast_eligible(notification, self.viewer):
            self._show_toast(notification)
        return True

    def handle_event(self, message: Mapping[str, Any]) -> None:
        """Route a realtime ``{"type", "data"}`` message to the session."""

        event_type = message.get("type")
        data = message.get("data")
        if event_type == NOTIFICATION_EVENT and isinstance(data, Mapping):
            self.on_broadcast(data)
        elif event_type in (USER_ONLINE_EVENT, USER_OFFLINE_EVENT) and isinstance(data, Mapping):
            user_id = data.get("userId")
            if user_id is None:
                return
            if event_type == USER_ONLINE_EVENT:
                self.online_users.add(str(user_id))
            else:
                self.online_users.discard(str(user_id))

    @staticmethod
    def identify_message(user_id: str) -> dict[str, Any]:
        return {"type": IDENTIFY_MESSAGE_TYPE, "data": {"userId": user_id}}

    def mark_read(self, notification_id: int) -> None:
        """Flag a notification as read locally and tell the server."""

        self.notifications = [
            dataclasses.replace(item, read=True) if item.id == notification_id else item
            for item in self.notifications
        ]
        if self._api is not None:
            self._fire_and_forget(self._api.mark_read(notification_id))

    def mark_all_read(self) -> None:
        self.notifications = [dataclasses.replace(item, read=True) for item in self.notifications]
        if self._api is not None:
            self._fire_and_forget(self._api.mark_all_read(**self._audience_params()))

    def clear(self) -> None:
        """Empty the local feed; server records are untouched."""

        self.notifications = []

    def dismiss_toast(self) -> None:
        if self.toast_state is ToastState.VISIBLE:
            self._begin_hide()

    def close(self) -> None:
        """Cancel every pending timer."""

        self._cancel_toast_timer()
        self.toast = None
        self.toast_state = ToastState.HIDDEN

    async def flush(self) -> None:
        """Wait for outstanding server calls to settle."""

        if self._calls:
            await asyncio.gather(*list(self._calls), return_exceptions=True)

    def _widen_leader_scope(self, snapshot: Iterable[Notification]) -> None:
        # Records matched only through the recipient email may name foreign projects.
        owned = {
            str(item.project_id)
            for item in snapshot
            if item.project_id is not None and item.recipient_email != self.viewer.email
        }
        if not owned <= self.viewer.project_ids:
            self.viewer = dataclasses.replace(
                self.viewer, project_ids=self.viewer.project_ids | owned
            )

    def _coerce(self, item: Notification | Mapping[str, Any]) -> Notification:
        if isinstance(item, Notification):
            return item
        return notification_from_payload(item)

    def _show_toast(self, notification: Notification) -> None:
        self._cancel_toast_timer()
        self.toast = notification
        self.toast_state = ToastState.VISIBLE
        loop = asyncio.get_running_loop()
        self._toast_timer = loop.call_later(self.toast_delay, self._begin_hide)

    def _begin_hide(self) -> None:
        self._cancel_toast_timer()
        self.toast_state = ToastState.HIDING
        loop = asyncio.get_running_loop()
        self._toast_timer = loop.call_later(self.exit_delay, self._finish_hide)

    def _finish_hide(self) -> None:
        self._toast_timer = None
        self.toast = None
        self.toast_state = ToastState.HIDDEN

    def _cancel_toast_timer(self) -> None:
        if self._toast_timer is not None:
            self._toast_timer.cancel()
            self._toast_timer = None

    def _fire_and_forget(self, call: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(call)
        self._calls.add(task)
        task.add_done_callback(self._log_call_result)

    def _log_call_result(self, task: asyncio.Task[Any]) -> None:
        self._calls.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Notification server call failed: %s", exc)


__all__ = ["IDENTIFY_MESSAGE_TYPE", "NotificationSession", "ToastState"]
