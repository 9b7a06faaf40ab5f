"""Audience rules deciding which notifications a viewer should see.

The same predicates scope the server-side list endpoint and the client-side
consumption of live broadcasts, so both paths always agree. Every function in
this module is pure.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Final

from .entities import (
    JOIN_RESPONSE_TITLES,
    REMINDER_TITLES,
    TITLE_ACTIVITY_EVALUATION,
    TITLE_ACTIVITY_JOIN,
    TITLE_ATTENDANCE_UPDATED,
    TITLE_JOIN_REQUEST,
    TITLE_JOIN_REQUEST_APPROVED,
    TITLE_NEW_PROJECT,
    TITLE_PROJECT_APPROVED,
    TITLE_SCHEDULE_UPDATED,
    Notification,
    PendingJoinRequest,
    Viewer,
    ViewerRole,
)
from .message_fields import join_request_email, response_email

ATTENDANCE_MESSAGE_MARKER: Final[str] = "Your attendance for activity"
RECIPIENT_ADDRESSED_TITLES: Final[frozenset[str]] = frozenset(
    {TITLE_SCHEDULE_UPDATED, TITLE_ACTIVITY_EVALUATION}
)

ADMIN_HIDDEN_TITLES: Final[frozenset[str]] = frozenset(
    {
        TITLE_PROJECT_APPROVED,
        TITLE_ACTIVITY_JOIN,
        TITLE_JOIN_REQUEST_APPROVED,
        TITLE_ATTENDANCE_UPDATED,
        TITLE_ACTIVITY_EVALUATION,
    }
    | REMINDER_TITLES
)
PARTICIPANT_HIDDEN_TITLES: Final[frozenset[str]] = frozenset(
    {
        TITLE_NEW_PROJECT,
        TITLE_JOIN_REQUEST,
        TITLE_PROJECT_APPROVED,
        TITLE_ACTIVITY_JOIN,
    }
)
TOAST_SUPPRESSED_TITLES: Final[dict[ViewerRole, frozenset[str]]] = {
    ViewerRole.ADMIN: frozenset({TITLE_PROJECT_APPROVED}),
    ViewerRole.LEADER: frozenset(),
    ViewerRole.PARTICIPANT: frozenset(),
}


def is_visible(notification: Notification, viewer: Viewer) -> bool:
    """Apply the role based allow/deny lists keyed on the title."""

    title = notification.title
    if viewer.role is ViewerRole.ADMIN:
        if title in ADMIN_HIDDEN_TITLES:
            return False
        return ATTENDANCE_MESSAGE_MARKER not in (notification.message or "")
    if viewer.role is ViewerRole.PARTICIPANT:
        # Reminder titles short-circuit the participant denylist.
        if title in REMINDER_TITLES:
            return True
        return title not in PARTICIPANT_HIDDEN_TITLES
    return True


def concerns_viewer(notification: Notification, viewer: Viewer) -> bool:
    """Return whether a participant notification is addressed to ``viewer``."""

    email = (viewer.email or "").strip()
    if not email:
        return False
    if email in (notification.message or ""):
        return True
    if notification.actor_email and notification.actor_email == email:
        return True
    if notification.title in RECIPIENT_ADDRESSED_TITLES:
        return notification.recipient_email == email
    return False


def is_relevant_to(notification: Notification, viewer: Viewer) -> bool:
    """Return whether ``notification`` belongs in ``viewer``'s feed."""

    if not is_visible(notification, viewer):
        return False
    if viewer.role is ViewerRole.LEADER:
        return viewer.scope.matches(notification)
    if viewer.role is ViewerRole.ADMIN:
        return True
    if notification.title in REMINDER_TITLES:
        return True
    return concerns_viewer(notification, viewer)


def is_toast_eligible(notification: Notification, viewer: Viewer) -> bool:
    """Return whether a new arrival should pop a toast for ``viewer``."""

    if not is_relevant_to(notification, viewer):
        return False
    return notification.title not in TOAST_SUPPRESSED_TITLES.get(viewer.role, frozenset())


def filter_for_viewer(
    notifications: Iterable[Notification], viewer: Viewer
) -> list[Notification]:
    """Keep the notifications relevant to ``viewer`` preserving order."""

    return [item for item in notifications if is_relevant_to(item, viewer)]


def _order_key(notification: Notification) -> tuple[float, int]:
    created_at = notification.created_at
    timestamp = created_at.timestamp() if isinstance(created_at, datetime) else 0.0
    return (timestamp, notification.id or 0)


def _request_email(notification: Notification) -> str | None:
    return notification.actor_email or join_request_email(notification.message)


def _response_email(notification: Notification) -> str | None:
    return notification.actor_email or response_email(notification.message)


def pending_join_requests(
    notifications: Sequence[Notification],
) -> list[PendingJoinRequest]:
    """Return join requests that have not been answered yet.

    A request is answered once an approval or decline notification exists for
    the same project and participant email that is not older than the
    request. Requests are deduplicated per ``(project, email)`` pair keeping
    the most recent one.
    """

    responses: dict[tuple[str, str], tuple[float, int]] = {}
    for item in notifications:
        if item.title not in JOIN_RESPONSE_TITLES or not item.project_id:
            continue
        email = _response_email(item)
        if not email:
            continue
        key = (str(item.project_id), email)
        order = _order_key(item)
        if key not in responses or order > responses[key]:
            responses[key] = order

    latest: dict[tuple[str, str], Notification] = {}
    for item in notifications:
        if item.title != TITLE_JOIN_REQUEST or not item.project_id:
            continue
        email = _request_email(item)
        if not email:
            continue
        key = (str(item.project_id), email)
        answered_at = responses.get(key)
        if answered_at is not None and answered_at >= _order_key(item):
            continue
        current = latest.get(key)
        if current is None or _order_key(item) > _order_key(current):
            latest[key] = item

    ordered = sorted(latest.values(), key=_order_key, reverse=True)
    return [
        PendingJoinRequest(
            notification_id=item.id or 0,
            email=_request_email(item) or "",
            project_id=str(item.project_id),
            created_at=item.created_at,
        )
        for item in ordered
    ]


__all__ = [
    "ADMIN_HIDDEN_TITLES",
    "ATTENDANCE_MESSAGE_MARKER",
    "PARTICIPANT_HIDDEN_TITLES",
    "RECIPIENT_ADDRESSED_TITLES",
    "TOAST_SUPPRESSED_TITLES",
    "concerns_viewer",
    "filter_for_viewer",
    "is_relevant_to",
    "is_toast_eligible",
    "is_visible",
    "pending_join_requests",
]
