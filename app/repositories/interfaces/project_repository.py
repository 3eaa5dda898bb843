from abc import ABC, abstractmethod
from typing import List, Optional
from app.models.schemas import Project, ProjectCreate, ProjectUpdate


class IProjectRepository(ABC):
    """Interface for project repository operations"""

    @abstractmethod
    async def create(self, project: ProjectCreate) -> Project:
        pass

    @abstractmethod
    async def get_by_id(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Project]:
        pass

    @abstractmethod
    async def get_all(self, skip: int = 0, limit: int = 100) -> List[Project]:
        pass

    @abstractmethod
    async def update(self, project_id: str, project_update: ProjectUpdate) -> Optional[Project]:
        pass

    @abstractmethod
    async def delete(self, project_id: str) -> bool:
        pass
