"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import WebSocket

from unihub.domain.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage every active websocket connection of the process."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Accept ``websocket`` and return the identifier assigned to it."""

        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self._connections[connection_id] = websocket
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        """Forget the connection registered as ``connection_id``."""

        self._connections.pop(connection_id, None)

    def connection_ids(self) -> list[str]:
        return list(self._connections)

    async def send(self, connection_id: str, message: dict[str, Any]) -> None:
        """Write ``message`` to a single connection."""

        websocket = self._connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_json(message)
        except Exception as exc:
            raise DeliveryError(
                f"Could not deliver {message.get('type')!r} to connection {connection_id}"
            ) from exc

    async def broadcast(self, message: dict[str, Any]) -> int:
        """Send ``message`` to every connection and return the delivery count."""

        delivered = 0
        for connection_id in list(self._connections):
            try:
                await self.send(connection_id, message.copy())
            except DeliveryError as exc:
                logger.warning("%s; dropping connection", exc)
                self.disconnect(connection_id)
                continue
            delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
