"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .presence import (
    USER_OFFLINE_EVENT,
    USER_ONLINE_EVENT,
    PresenceRegistry,
    presence_registry,
)
from .publisher import (
    NOTIFICATION_EVENT,
    NotificationPublisher,
    dispatch_notification,
    notification_publisher,
    serialize_notification,
)
from .realtime import (
    RealtimeEventPublisher,
    realtime_event_publisher,
)
from .scheduling import drain_background_tasks, schedule

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "NOTIFICATION_EVENT",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
    "RealtimeEventPublisher",
    "realtime_event_publisher",
    "USER_ONLINE_EVENT",
    "USER_OFFLINE_EVENT",
    "PresenceRegistry",
    "presence_registry",
    "schedule",
    "drain_background_tasks",
]
