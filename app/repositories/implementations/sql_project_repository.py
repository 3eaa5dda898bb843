from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from app.repositories.interfaces.project_repository import IProjectRepository
from app.models.database import ProjectModel
from app.models.schemas import Project, ProjectCreate, ProjectUpdate


# Columns a project always has a value for; an explicit null in an update leaves them unchanged
_REQUIRED_FIELDS = {"description", "base_url", "base_path", "tags", "status", "type"}


def _to_columns(data: Dict[str, Any]) -> Dict[str, Any]:
    if "metadata" in data:
        data["project_metadata"] = data.pop("metadata")
    return data


class SQLProjectRepository(IProjectRepository):
    """SQLAlchemy implementation of project repository"""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, project_id: str) -> Optional[ProjectModel]:
        return self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()

    async def create(self, project: ProjectCreate) -> Project:
        """Create a new project"""
        db_project = ProjectModel(**_to_columns(project.model_dump()))
        self.db.add(db_project)
        self.db.commit()
        self.db.refresh(db_project)
        return Project.model_validate(db_project)

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        """Get project by ID"""
        db_project = self._find(project_id)
        if db_project:
            return Project.model_validate(db_project)
        return None

    async def get_by_name(self, name: str) -> Optional[Project]:
        """Get project by its unique name"""
        db_project = self.db.query(ProjectModel).filter(ProjectModel.name == name).first()
        if db_project:
            return Project.model_validate(db_project)
        return None

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Project]:
        """Get all projects with pagination"""
        db_projects = (
            self.db.query(ProjectModel)
            .order_by(ProjectModel.created_at)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [Project.model_validate(project) for project in db_projects]

    async def update(self, project_id: str, project_update: ProjectUpdate) -> Optional[Project]:
        """Update an existing project"""
        db_project = self._find(project_id)
        if not db_project:
            return None

        update_data = _to_columns({
            field: value
            for field, value in project_update.model_dump(exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_FIELDS
        })
        for field, value in update_data.items():
            setattr(db_project, field, value)

        self.db.commit()
        self.db.refresh(db_project)
        return Project.model_validate(db_project)

    async def delete(self, project_id: str) -> bool:
        """Delete a project"""
        db_project = self._find(project_id)
        if not db_project:
            return False

        self.db.delete(db_project)
        self.db.commit()
        return True
