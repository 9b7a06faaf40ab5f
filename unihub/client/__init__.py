"""Async client helpers consuming the notification service."""

from .api import NotificationApiClient, NotificationApiError, notification_from_payload
from .reminders import JoinedActivity, PlannedReminder, ReminderScheduler, plan_reminders
from .session import NotificationSession, ToastState

__all__ = [
    "NotificationApiClient",
    "NotificationApiError",
    "notification_from_payload",
    "JoinedActivity",
    "PlannedReminder",
    "ReminderScheduler",
    "plan_reminders",
    "NotificationSession",
    "ToastState",
]
