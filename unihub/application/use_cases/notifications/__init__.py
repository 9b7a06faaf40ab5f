"""Public helpers for recording, reading and emitting notifications."""

from .create_notification import create_notification
from .events import (
    notify_activity_join,
    notify_attendance_updated,
    notify_join_request,
    notify_join_response,
    notify_project_approved,
    notify_project_created,
    notify_schedule_updated,
)
from .list_notifications import (
    list_notifications,
    list_pending_join_requests,
    resolve_leader_filter,
)
from .mark_notifications_read import (
    mark_all_notifications_read,
    mark_notification_read,
)

__all__ = [
    "create_notification",
    "list_notifications",
    "list_pending_join_requests",
    "resolve_leader_filter",
    "mark_notification_read",
    "mark_all_notifications_read",
    "notify_project_created",
    "notify_project_approved",
    "notify_join_request",
    "notify_join_response",
    "notify_activity_join",
    "notify_attendance_updated",
    "notify_schedule_updated",
]
