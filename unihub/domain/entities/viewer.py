"""Domain entity describing who is looking at a notification feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .notification import NotificationFilter


class ViewerRole(str, Enum):
    """Portal roles that consume notifications."""

    ADMIN = "admin"
    LEADER = "leader"
    PARTICIPANT = "participant"


@dataclass(frozen=True)
class Viewer:
    """Identity and role of the feed consumer.

    ``project_ids`` lists the projects a leader owns; together with ``email``
    it bounds what a leader may receive.
    """

    role: ViewerRole
    email: str | None = None
    user_id: str | None = None
    project_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def scope(self) -> NotificationFilter:
        return NotificationFilter(recipient_email=self.email, project_ids=self.project_ids)


__all__ = ["Viewer", "ViewerRole"]
