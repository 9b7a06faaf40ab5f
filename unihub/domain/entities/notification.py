"""Domain entity representing a portal notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

TITLE_NEW_PROJECT = "New project created"
TITLE_PROJECT_APPROVED = "Project approved"
TITLE_JOIN_REQUEST = "Join request"
TITLE_JOIN_REQUEST_APPROVED = "Join request approved"
TITLE_JOIN_REQUEST_DECLINED = "Join request declined"
TITLE_ACTIVITY_JOIN = "Activity join"
TITLE_ATTENDANCE_UPDATED = "Activity attendance updated"
TITLE_SCHEDULE_UPDATED = "Activity schedule updated"
TITLE_ACTIVITY_STARTING_SOON = "Activity Starting Soon"
TITLE_ACTIVITY_STARTED = "Activity Started"
TITLE_ACTIVITY_ENDING_SOON = "Activity Ending Soon"
TITLE_ACTIVITY_ENDED = "Activity Ended"
TITLE_ACTIVITY_EVALUATION = "Activity Evaluation"

REMINDER_TITLES: frozenset[str] = frozenset(
    {
        TITLE_ACTIVITY_STARTING_SOON,
        TITLE_ACTIVITY_STARTED,
        TITLE_ACTIVITY_ENDING_SOON,
        TITLE_ACTIVITY_ENDED,
    }
)
JOIN_RESPONSE_TITLES: frozenset[str] = frozenset(
    {TITLE_JOIN_REQUEST_APPROVED, TITLE_JOIN_REQUEST_DECLINED}
)

DECISION_APPROVED = "approved"
DECISION_DECLINED = "declined"


@dataclass
class Notification:
    """Timestamped event record optionally scoped to a project or recipient.

    ``actor_email``, ``activity_title`` and ``decision`` hold the structured
    values that older records only carry inside ``message``.
    """

    id: int | None
    title: str
    message: str
    project_id: str | None = None
    recipient_email: str | None = None
    read: bool = False
    created_at: datetime | None = None
    actor_email: str | None = None
    activity_title: str | None = None
    decision: str | None = None


@dataclass(frozen=True)
class NotificationFilter:
    """Audience restriction for list queries; clauses are combined with OR."""

    recipient_email: str | None = None
    project_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.recipient_email and not self.project_ids

    def matches(self, notification: Notification) -> bool:
        """Apply the same OR predicate the repository uses for list queries."""

        if notification.project_id is not None and str(notification.project_id) in self.project_ids:
            return True
        return bool(self.recipient_email) and notification.recipient_email == self.recipient_email


@dataclass(frozen=True)
class PendingJoinRequest:
    """A join request still awaiting a leader decision."""

    notification_id: int
    email: str
    project_id: str
    created_at: datetime | None


__all__ = [
    "Notification",
    "NotificationFilter",
    "PendingJoinRequest",
    "REMINDER_TITLES",
    "JOIN_RESPONSE_TITLES",
    "DECISION_APPROVED",
    "DECISION_DECLINED",
    "TITLE_NEW_PROJECT",
    "TITLE_PROJECT_APPROVED",
    "TITLE_JOIN_REQUEST",
    "TITLE_JOIN_REQUEST_APPROVED",
    "TITLE_JOIN_REQUEST_DECLINED",
    "TITLE_ACTIVITY_JOIN",
    "TITLE_ATTENDANCE_UPDATED",
    "TITLE_SCHEDULE_UPDATED",
    "TITLE_ACTIVITY_STARTING_SOON",
    "TITLE_ACTIVITY_STARTED",
    "TITLE_ACTIVITY_ENDING_SOON",
    "TITLE_ACTIVITY_ENDED",
    "TITLE_ACTIVITY_EVALUATION",
]
