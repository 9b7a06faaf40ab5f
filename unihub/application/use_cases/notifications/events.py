"""Utility helpers to generate notifications for portal domain events."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unihub.config import get_settings
from unihub.domain.entities import (
    DECISION_APPROVED,
    DECISION_DECLINED,
    TITLE_ACTIVITY_JOIN,
    TITLE_ATTENDANCE_UPDATED,
    TITLE_JOIN_REQUEST,
    TITLE_JOIN_REQUEST_APPROVED,
    TITLE_JOIN_REQUEST_DECLINED,
    TITLE_NEW_PROJECT,
    TITLE_PROJECT_APPROVED,
    TITLE_SCHEDULE_UPDATED,
    Notification,
    Project,
)
from unihub.domain.exceptions import ValidationError
from unihub.infrastructure.email import send_email_to_many
from unihub.infrastructure.email_templates import render_notification_email
from unihub.infrastructure.repositories import NotificationRepository, ProjectRepository
from unihub.utils import format_display_datetime

from .create_notification import create_notification

logger = logging.getLogger(__name__)

_RESPONSE_TITLES = {
    DECISION_APPROVED: TITLE_JOIN_REQUEST_APPROVED,
    DECISION_DECLINED: TITLE_JOIN_REQUEST_DECLINED,
}


def _register_project(session: Session, project: Project) -> None:
    try:
        ProjectRepository(session).save(project)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to register project %s", project.id)


def _email_parties(
    notification: Notification, project: Project, recipients: Iterable[str | None]
) -> None:
    """Send the rendered notification to parties not named as its recipient."""

    addresses = [address for address in recipients if address]
    if not addresses:
        return
    rendered = render_notification_email(
        notification, project_name=project.name, base_url=get_settings().frontend_url
    )
    send_email_to_many(addresses, rendered.subject, rendered.html, rendered.text)


def notify_project_created(
    session: Session,
    *,
    project: Project,
    admin_emails: Iterable[str] = (),
) -> Notification:
    """Announce a newly submitted project to the administrators."""

    _register_project(session, project)
    author = project.leader_email or project.name
    notification = create_notification(
        session,
        title=TITLE_NEW_PROJECT,
        message=f"{author} created new project",
        project_id=project.id,
        actor_email=project.leader_email,
    )
    _email_parties(notification, project, admin_emails)
    return notification


def notify_project_approved(session: Session, *, project: Project) -> Notification:
    """Tell the project leader that an administrator approved the project."""

    _register_project(session, project)
    notification = create_notification(
        session,
        title=TITLE_PROJECT_APPROVED,
        message="Admin approved your project",
        project_id=project.id,
    )
    _email_parties(notification, project, [project.leader_email])
    return notification


def notify_join_request(
    session: Session,
    *,
    project: Project,
    email: str,
    admin_emails: Iterable[str] = (),
) -> Notification:
    """Record a participant request to join ``project``."""

    email = (email or "").strip()
    if not email:
        raise ValidationError("Participant email is required")
    notification = create_notification(
        session,
        title=TITLE_JOIN_REQUEST,
        message=f"{email} wants to join",
        project_id=project.id,
        actor_email=email,
    )
    _email_parties(notification, project, [*admin_emails, project.leader_email])
    return notification


def notify_join_response(
    session: Session,
    *,
    project: Project,
    email: str,
    decision: str,
) -> Notification:
    """Record the leader decision on a join request and notify the participant.

    The originating join requests are flagged as read before the response is
    created.
    """

    email = (email or "").strip()
    normalized = (decision or "").strip().lower()
    if not email:
        raise ValidationError("Participant email is required")
    if normalized not in _RESPONSE_TITLES:
        raise ValidationError("Decision must be either 'approved' or 'declined'")

    try:
        NotificationRepository(session).mark_join_requests_as_read(
            project_id=project.id,
            message=f"{email} wants to join",
            title=TITLE_JOIN_REQUEST,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to mark join request notifications as read")

    return create_notification(
        session,
        title=_RESPONSE_TITLES[normalized],
        message=f'{email} - Your request to join "{project.name}" was {normalized}.',
        project_id=project.id,
        recipient_email=email,
        actor_email=email,
        decision=normalized,
    )


def notify_activity_join(
    session: Session,
    *,
    project: Project,
    email: str,
    activity_title: str,
) -> Notification:
    """Tell the project leader that a participant joined an activity."""

    notification = create_notification(
        session,
        title=TITLE_ACTIVITY_JOIN,
        message=f'{email} joined activity "{activity_title}" of project "{project.name}"',
        project_id=project.id,
        actor_email=email,
        activity_title=activity_title,
    )
    _email_parties(notification, project, [project.leader_email])
    return notification


def notify_attendance_updated(
    session: Session,
    *,
    project: Project,
    email: str,
    activity_title: str,
    status: str,
) -> Notification:
    """Tell a participant how their attendance was recorded."""

    return create_notification(
        session,
        title=TITLE_ATTENDANCE_UPDATED,
        message=(
            f'{email} - Your attendance for activity "{activity_title}" in project '
            f'"{project.name}" was marked as {status}.'
        ),
        project_id=project.id,
        recipient_email=email,
        actor_email=email,
        activity_title=activity_title,
    )


def notify_schedule_updated(
    session: Session,
    *,
    project: Project,
    activity_title: str,
    participant_emails: Iterable[str],
    start_at: datetime | None = None,
    end_at: datetime | None = None,
    location: str | None = None,
) -> list[Notification]:
    """Create one schedule update notification per registered participant."""

    lines: list[str] = []
    start_label = format_display_datetime(start_at)
    end_label = format_display_datetime(end_at)
    if start_label:
        lines.append(f"Start: {start_label}")
    if end_label:
        lines.append(f"End: {end_label}")
    if location and location.strip():
        lines.append(f"Location: {location.strip()}")
    details = f" ({' · '.join(lines)})" if lines else ""

    created: list[Notification] = []
    seen: set[str] = set()
    for email in participant_emails:
        recipient = (email or "").strip()
        if not recipient or recipient in seen:
            continue
        seen.add(recipient)
        created.append(
            create_notification(
                session,
                title=TITLE_SCHEDULE_UPDATED,
                message=f"[{project.name}] {activity_title}{details}",
                project_id=project.id,
                recipient_email=recipient,
                activity_title=activity_title,
            )
        )
    return created


__all__ = [
    "notify_project_created",
    "notify_project_approved",
    "notify_join_request",
    "notify_join_response",
    "notify_activity_join",
    "notify_attendance_updated",
    "notify_schedule_updated",
]
