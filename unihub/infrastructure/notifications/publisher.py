"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import logging
from typing import Any

from unihub.domain.entities import Notification
from unihub.utils import isoformat_or_none

from .manager import NotificationConnectionManager, notification_manager
from .scheduling import schedule

NOTIFICATION_EVENT = "notification:new"

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and broadcast them to every connected client.

    Relevance is resolved by each client with the shared audience rules, so
    the server never picks subscribers.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, notification: Notification) -> None:
        """Schedule the broadcast of ``notification``; never raises."""

        message = {"type": NOTIFICATION_EVENT, "data": self._serialize(notification)}
        try:
            schedule(self._deliver, message)
        except Exception:
            logger.exception(
                "Failed to schedule broadcast for notification %s", notification.id
            )

    async def _deliver(self, message: dict[str, Any]) -> None:
        try:
            delivered = await self._manager.broadcast(message)
        except Exception:
            logger.exception("Failed to broadcast %s event", message.get("type"))
            return
        logger.debug(
            "Broadcast notification %s to %s connection(s)",
            message["data"].get("id"),
            delivered,
        )

    @staticmethod
    def _serialize(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "title": notification.title,
            "message": notification.message,
            "projectId": notification.project_id,
            "recipientEmail": notification.recipient_email,
            "timestamp": isoformat_or_none(notification.created_at),
            "read": bool(notification.read),
        }


notification_publisher = NotificationPublisher(notification_manager)


def dispatch_notification(notification: Notification) -> None:
    """Public helper that delegates to the shared publisher instance."""

    notification_publisher.dispatch(notification)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return NotificationPublisher._serialize(notification)


__all__ = [
    "NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
]
