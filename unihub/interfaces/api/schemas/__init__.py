from .notification import (
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    PendingJoinRequestRead,
)
from .presence import OnlineUsersRead

__all__ = [
    "MarkAllReadResponse",
    "NotificationCreate",
    "NotificationRead",
    "PendingJoinRequestRead",
    "OnlineUsersRead",
]
