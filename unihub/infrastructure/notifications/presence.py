"""Process-wide registry of online users."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from unihub.domain.exceptions import PresenceInconsistency

from .realtime import realtime_event_publisher

USER_ONLINE_EVENT = "user:online"
USER_OFFLINE_EVENT = "user:offline"

logger = logging.getLogger(__name__)


class EventBroadcaster(Protocol):
    def broadcast(self, event_type: str, payload: Any) -> None: ...


class PresenceRegistry:
    """Count live connections per user and announce online/offline edges.

    A user is present while at least one identified connection is open. The
    count is read and written without suspension points so interleaved
    connection events cannot corrupt it.
    """

    def __init__(self, broadcaster: EventBroadcaster) -> None:
        self._broadcaster = broadcaster
        self._counts: dict[str, int] = {}
        self._users_by_connection: dict[str, str] = {}

    def identify(self, connection_id: str, user_id: str) -> bool:
        """Associate ``connection_id`` with ``user_id``.

        Returns ``True`` when the user just came online.
        """

        if not user_id:
            return False

        previous = self._users_by_connection.get(connection_id)
        if previous == user_id:
            self._report(
                PresenceInconsistency(
                    f"Connection {connection_id} identified twice as {user_id}"
                )
            )
            return False
        if previous is not None:
            self._report(
                PresenceInconsistency(
                    f"Connection {connection_id} re-identified from {previous} to {user_id}"
                )
            )
            self.disconnect(connection_id)

        self._users_by_connection[connection_id] = user_id
        current = self._counts.get(user_id, 0)
        self._counts[user_id] = current + 1
        if current == 0:
            logger.info("User %s is online", user_id)
            self._broadcaster.broadcast(USER_ONLINE_EVENT, {"userId": user_id})
            return True
        return False

    def disconnect(self, connection_id: str) -> bool:
        """Release ``connection_id``; returns ``True`` when its user went offline."""

        user_id = self._users_by_connection.pop(connection_id, None)
        if user_id is None:
            return False

        current = self._counts.get(user_id)
        if current is None:
            self._report(
                PresenceInconsistency(f"No live count for {user_id} on disconnect")
            )
            return False
        if current <= 1:
            del self._counts[user_id]
            logger.info("User %s is offline", user_id)
            self._broadcaster.broadcast(USER_OFFLINE_EVENT, {"userId": user_id})
            return True
        self._counts[user_id] = current - 1
        return False

    def list_online(self) -> set[str]:
        return set(self._counts)

    def connection_count(self, user_id: str) -> int:
        return self._counts.get(user_id, 0)

    @staticmethod
    def _report(issue: PresenceInconsistency) -> None:
        logger.debug("Presence inconsistency ignored: %s", issue)


presence_registry = PresenceRegistry(realtime_event_publisher)


__all__ = [
    "USER_ONLINE_EVENT",
    "USER_OFFLINE_EVENT",
    "PresenceRegistry",
    "presence_registry",
]
