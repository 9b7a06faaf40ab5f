"""Use case for recording a notification and fanning it out."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unihub.domain.entities import Notification
from unihub.domain.exceptions import ValidationError
from unihub.domain.message_fields import with_structured_fields
from unihub.infrastructure.email import dispatch_notification_email
from unihub.infrastructure.notifications import dispatch_notification
from unihub.infrastructure.repositories import NotificationRepository, ProjectRepository
from unihub.utils import now_in_app_timezone

logger = logging.getLogger(__name__)


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _project_name(session: Session, project_id: str | None) -> str | None:
    if not project_id:
        return None
    try:
        project = ProjectRepository(session).get(project_id)
    except SQLAlchemyError:
        logger.exception("Failed to look up project %s for email rendering", project_id)
        return None
    return project.name if project else None


def create_notification(
    session: Session,
    *,
    title: str | None,
    message: str | None,
    project_id: str | None = None,
    recipient_email: str | None = None,
    actor_email: str | None = None,
    activity_title: str | None = None,
    decision: str | None = None,
) -> Notification:
    """Persist a notification, then broadcast it and email its recipient.

    Broadcast and email are scheduled fire-and-forget once the record is
    stored; their failures are logged and never reach the caller. When the
    store write fails nothing is broadcast or emailed.
    """

    clean_title = (title or "").strip()
    clean_message = (message or "").strip()
    if not clean_title or not clean_message:
        raise ValidationError("Title and message are required")

    notification = with_structured_fields(
        Notification(
            id=None,
            title=clean_title,
            message=clean_message,
            project_id=_clean_optional(project_id),
            recipient_email=_clean_optional(recipient_email),
            read=False,
            created_at=now_in_app_timezone(),
            actor_email=_clean_optional(actor_email),
            activity_title=_clean_optional(activity_title),
            decision=_clean_optional(decision),
        )
    )
    saved = NotificationRepository(session).create(notification)
    logger.info("Created notification %s (%s)", saved.id, saved.title)

    dispatch_notification(saved)
    if saved.recipient_email:
        dispatch_notification_email(
            saved, project_name=_project_name(session, saved.project_id)
        )
    return saved


__all__ = ["create_notification"]
