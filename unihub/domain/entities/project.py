"""Domain entity with the project fields the notification core reads."""

from dataclasses import dataclass


@dataclass
class Project:
    """Extension project reference owned by a project leader."""

    id: str
    name: str
    leader_id: str | None = None
    leader_email: str | None = None


__all__ = ["Project"]
