"""Use cases for the read flag, the only mutable notification field."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from unihub.domain.entities import Notification, NotificationFilter
from unihub.domain.exceptions import NotFoundError
from unihub.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


def mark_notification_read(session: Session, notification_id: int) -> Notification:
    """Mark a single notification as read; repeating the call is harmless."""

    notification = NotificationRepository(session).mark_as_read(notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification


def mark_all_notifications_read(
    session: Session, *, notification_filter: NotificationFilter | None = None
) -> int:
    """Mark every unread notification in the audience as read.

    Returns the number of notifications whose state changed.
    """

    updated = NotificationRepository(session).mark_all_as_read(
        notification_filter=notification_filter
    )
    if updated:
        logger.info("Marked %s notification(s) as read", updated)
    return updated


__all__ = ["mark_notification_read", "mark_all_notifications_read"]
