"""Domain entities exposed by the application."""

from .notification import (
    DECISION_APPROVED,
    DECISION_DECLINED,
    JOIN_RESPONSE_TITLES,
    REMINDER_TITLES,
    TITLE_ACTIVITY_ENDED,
    TITLE_ACTIVITY_ENDING_SOON,
    TITLE_ACTIVITY_EVALUATION,
    TITLE_ACTIVITY_JOIN,
    TITLE_ACTIVITY_STARTED,
    TITLE_ACTIVITY_STARTING_SOON,
    TITLE_ATTENDANCE_UPDATED,
    TITLE_JOIN_REQUEST,
    TITLE_JOIN_REQUEST_APPROVED,
    TITLE_JOIN_REQUEST_DECLINED,
    TITLE_NEW_PROJECT,
    TITLE_PROJECT_APPROVED,
    TITLE_SCHEDULE_UPDATED,
    Notification,
    NotificationFilter,
    PendingJoinRequest,
)
from .project import Project
from .viewer import Viewer, ViewerRole

__all__ = [
    "Notification",
    "NotificationFilter",
    "PendingJoinRequest",
    "Project",
    "Viewer",
    "ViewerRole",
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
