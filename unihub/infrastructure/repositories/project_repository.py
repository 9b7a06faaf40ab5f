"""Persistence helpers for project references."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from unihub.domain.entities import Project
from unihub.infrastructure.models import ProjectModel


class ProjectRepository:
    """Read and register the project references notifications point to."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, project_id: str) -> Project | None:
        model = self.session.get(ProjectModel, project_id)
        return self._to_entity(model) if model is not None else None

    def list_ids_by_leader(self, leader_id: str) -> Sequence[str]:
        rows = (
            self.session.query(ProjectModel.id)
            .filter(ProjectModel.leader_id == leader_id)
            .all()
        )
        return [row[0] for row in rows]

    def save(self, project: Project) -> Project:
        model = self.session.get(ProjectModel, project.id)
        if model is None:
            model = ProjectModel(id=project.id)
        model.name = project.name
        model.leader_id = project.leader_id
        model.leader_email = project.leader_email
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ProjectModel) -> Project:
        return Project(
            id=model.id,
            name=model.name,
            leader_id=model.leader_id,
            leader_email=model.leader_email,
        )


__all__ = ["ProjectRepository"]
