"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .project_repository import ProjectRepository

__all__ = [
    "NotificationRepository",
    "ProjectRepository",
]
