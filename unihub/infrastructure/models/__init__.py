"""ORM models used by the application infrastructure."""

from .notification import NotificationModel
from .project import ProjectModel

__all__ = [
    "NotificationModel",
    "ProjectModel",
]
