from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.core.database import get_database
from app.models.database import Base
from app.models.schemas import Project, ProjectCreate, ProjectUpdate
from app.repositories.interfaces.project_repository import IProjectRepository
from app.services.code_manipulation.feature_files import FeatureFilesManipulationService
from app.services.code_manipulation.step_files import StepFilesManipulationService
from app.services.code_manipulation.test_case_analysis import TestCaseAnalysisService

# Test database
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_database] = override_get_db


@pytest.fixture
def test_client():
    """Synchronous test client backed by a fresh in-memory database"""
    Base.metadata.create_all(bind=engine)
    yield TestClient(app)
    Base.metadata.drop_all(bind=engine)


class InMemoryProjectRepository(IProjectRepository):
    """Project repository double for service-level tests"""

    def __init__(self, projects: Optional[List[Project]] = None):
        self.projects: Dict[str, Project] = {p.id: p for p in projects or []}

    async def create(self, project: ProjectCreate) -> Project:
        raise NotImplementedError

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        return self.projects.get(project_id)

    async def get_by_name(self, name: str) -> Optional[Project]:
        return next((p for p in self.projects.values() if p.name == name), None)

    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Project]:
        return list(self.projects.values())[skip:skip + limit]

    async def update(self, project_id: str, project_update: ProjectUpdate) -> Optional[Project]:
        raise NotImplementedError

    async def delete(self, project_id: str) -> bool:
        return self.projects.pop(project_id, None) is not None


@pytest.fixture
def make_project():
    """Build a Project record rooted at ``path``"""

    def _make(path: Optional[str], project_id: str = "p-1") -> Project:
        return Project(
            id=project_id,
            name="shop-api",
            base_url="https://shop.example.com",
            path=path,
            created_at="2024-01-01T00:00:00",
            updated_at="2024-01-01T00:00:00",
        )

    return _make


@pytest.fixture
def workspace(tmp_path) -> Path:
    """Project workspace with the artifact directories of the 'catalog' section"""
    for directory in ("features", "steps", "fixtures", "schemas", "types", "api"):
        (tmp_path / "src" / directory / "catalog").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def analysis_service(workspace, make_project):
    """Analysis service whose only project "p-1" is rooted at ``workspace``;
    "no-path" is a project without a workspace path."""
    repository = InMemoryProjectRepository([
        make_project(str(workspace)),
        make_project(None, project_id="no-path"),
    ])
    return TestCaseAnalysisService(
        project_repository=repository,
        step_files_service=StepFilesManipulationService(),
        feature_files_service=FeatureFilesManipulationService(),
    )
