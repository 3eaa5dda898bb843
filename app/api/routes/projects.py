from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
import structlog

from app.models.schemas import Project, ProjectCreate, ProjectUpdate
from app.repositories.interfaces.project_repository import IProjectRepository
from app.core.dependencies import get_project_repository

logger = structlog.get_logger()

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("/", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    repository: IProjectRepository = Depends(get_project_repository)
):
    """Register a project and its workspace path"""
    if await repository.get_by_name(project.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Project '{project.name}' already exists"
        )
    created = await repository.create(project)
    logger.info("Project created", project_id=created.id, name=created.name, path=created.path)
    return created


@router.get("/", response_model=List[Project])
async def get_all_projects(
    skip: int = 0,
    limit: int = 100,
    repository: IProjectRepository = Depends(get_project_repository)
):
    """Get all projects with pagination"""
    return await repository.get_all(skip=skip, limit=limit)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    repository: IProjectRepository = Depends(get_project_repository)
):
    """Get a project by ID"""
    project = await repository.get_by_id(project_id)
    if not project:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return project


@router.put("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    update_data: ProjectUpdate,
    repository: IProjectRepository = Depends(get_project_repository)
):
    """Update an existing project"""
    updated = await repository.update(project_id, update_data)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return updated


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    repository: IProjectRepository = Depends(get_project_repository)
):
    """Delete a project"""
    if not await repository.delete(project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    logger.info("Project deleted", project_id=project_id)
    return {"message": "Project deleted successfully"}
