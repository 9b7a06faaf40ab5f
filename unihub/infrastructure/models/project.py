"""SQLAlchemy model for the project references used by notifications."""

from sqlalchemy import Column, String

from unihub.infrastructure.database import Base


class ProjectModel(Base):
    """Minimal projection of an extension project."""

    __tablename__ = "project"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    leader_id = Column(String(64), nullable=True, index=True)
    leader_email = Column(String(254), nullable=True)


__all__ = ["ProjectModel"]
