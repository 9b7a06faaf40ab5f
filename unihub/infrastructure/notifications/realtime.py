"""Helpers to broadcast realtime events to connected clients."""

from __future__ import annotations

import copy
import logging
from typing import Any

from .manager import NotificationConnectionManager, notification_manager
from .scheduling import schedule

logger = logging.getLogger(__name__)


class RealtimeEventPublisher:
    """Dispatch structured realtime events to every websocket subscriber."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def broadcast(self, event_type: str, payload: Any) -> None:
        """Schedule ``event_type`` for all connections; never raises."""

        message = {"type": event_type, "data": copy.deepcopy(payload)}
        try:
            schedule(self._deliver, message)
        except Exception:
            logger.exception("Failed to schedule %s event", event_type)

    async def _deliver(self, message: dict[str, Any]) -> None:
        try:
            await self._manager.broadcast(message)
        except Exception:
            logger.exception("Failed to broadcast %s event", message.get("type"))


realtime_event_publisher = RealtimeEventPublisher(notification_manager)


__all__ = [
    "RealtimeEventPublisher",
    "realtime_event_publisher",
]
