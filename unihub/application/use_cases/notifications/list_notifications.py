"""Use cases for reading the notification feed."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unihub.config import get_settings
from unihub.domain.entities import (
    Notification,
    NotificationFilter,
    PendingJoinRequest,
    Viewer,
)
from unihub.domain.message_fields import with_structured_fields
from unihub.domain.notification_rules import filter_for_viewer, pending_join_requests
from unihub.infrastructure.repositories import NotificationRepository, ProjectRepository

logger = logging.getLogger(__name__)


def resolve_leader_filter(
    session: Session,
    *,
    leader_id: str | None = None,
    leader_email: str | None = None,
) -> NotificationFilter | None:
    """Build the audience filter for a project leader.

    Returns ``None`` when neither argument is provided, meaning the full
    administrator audience. A provided but unmatched leader yields an empty
    filter, which lists nothing.
    """

    leader_id = (leader_id or "").strip()
    leader_email = (leader_email or "").strip()
    if not leader_id and not leader_email:
        return None

    project_ids: frozenset[str] = frozenset()
    if leader_id:
        try:
            project_ids = frozenset(ProjectRepository(session).list_ids_by_leader(leader_id))
        except SQLAlchemyError:
            logger.exception("Failed to look up leader projects for notifications")

    return NotificationFilter(
        recipient_email=leader_email or None,
        project_ids=project_ids,
    )


def list_notifications(
    session: Session,
    *,
    notification_filter: NotificationFilter | None = None,
    viewer: Viewer | None = None,
    limit: int | None = None,
) -> list[Notification]:
    """Return the most recent notifications, newest first."""

    page_size = limit or get_settings().notification_page_size
    notifications = [
        with_structured_fields(item)
        for item in NotificationRepository(session).list_recent(
            notification_filter=notification_filter, limit=page_size
        )
    ]
    if viewer is not None:
        return filter_for_viewer(notifications, viewer)
    return notifications


def list_pending_join_requests(
    session: Session,
    *,
    notification_filter: NotificationFilter | None = None,
) -> Sequence[PendingJoinRequest]:
    """Return the join requests in the feed that still await a decision."""

    return pending_join_requests(
        list_notifications(session, notification_filter=notification_filter)
    )


__all__ = [
    "list_notifications",
    "list_pending_join_requests",
    "resolve_leader_filter",
]
