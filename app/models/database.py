import uuid
from sqlalchemy import Column, String, Text, DateTime, Enum, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from app.models.schemas import ProjectStatus, ProjectType

Base = declarative_base()


def _new_project_id() -> str:
    return str(uuid.uuid4())


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_new_project_id)
    name = Column(String(255), nullable=False, unique=True, index=True)
    display_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=False, default="")
    base_url = Column(String(500), nullable=False)
    base_path = Column(String(255), nullable=True, default="/v1/api")
    tags = Column(JSON, default=list)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.PENDING)
    type = Column(Enum(ProjectType), default=ProjectType.PLAYWRIGHT_BDD)
    # Workspace root; generated artifacts live under <path>/src/...
    path = Column(String(1024), nullable=True)
    project_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}', status='{self.status}')>"
