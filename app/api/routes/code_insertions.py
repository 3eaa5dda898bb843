import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from app.config.settings import settings
from app.core.dependencies import get_code_insertion_service, get_test_case_analysis_service
from app.core.exceptions import ProjectNotFoundError, ProjectPathNotConfiguredError
from app.models.schemas import (
    AnalyzeInsertionsRequest,
    AnalyzeInsertionsResponse,
    ApplyInsertionsRequest,
    GenerationRequest,
    InsertionResult,
    ProjectStructureResponse,
)
from app.services.code_manipulation.code_insertion import CodeInsertionService
from app.services.code_manipulation.test_case_analysis import TestCaseAnalysisService

logger = structlog.get_logger()

router = APIRouter(prefix="/code-insertions", tags=["code-insertions"])


def _new_generation_id() -> str:
    return f"gen-{uuid.uuid4().hex[:12]}"


def _project_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ProjectNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


@router.post("/analyze", response_model=AnalyzeInsertionsResponse)
async def analyze_insertions(
    body: AnalyzeInsertionsRequest,
    analysis: TestCaseAnalysisService = Depends(get_test_case_analysis_service),
    inserter: CodeInsertionService = Depends(get_code_insertion_service)
):
    """Determine where generated code goes in the project's files, without writing anything"""
    generation_id = body.generation_id or _new_generation_id()
    logger.info(
        "Analyzing insertions",
        generation_id=generation_id,
        project_id=body.request.project_id,
        entity=body.request.entity_name,
        section=body.request.section,
    )
    try:
        insertions = await analysis.analyze_and_determine_insertions(
            body.request, body.generated_code, generation_id
        )
    except (ProjectNotFoundError, ProjectPathNotConfiguredError) as e:
        logger.warning("Insertion analysis aborted", generation_id=generation_id, error=str(e))
        raise _project_error(e)

    return AnalyzeInsertionsResponse(
        generation_id=generation_id,
        insertions=insertions,
        stats=inserter.get_insertion_stats(insertions),
    )


@router.post("/apply", response_model=InsertionResult)
async def apply_insertions(
    body: ApplyInsertionsRequest,
    inserter: CodeInsertionService = Depends(get_code_insertion_service)
):
    """Splice insertion descriptors into their files"""
    generation_id = body.generation_id or _new_generation_id()
    create_backups = settings.create_insertion_backups if body.create_backups is None else body.create_backups
    return inserter.insert_code(body.insertions, generation_id, create_backups=create_backups)


@router.post("/structure", response_model=ProjectStructureResponse)
async def project_structure(
    request: GenerationRequest,
    analysis: TestCaseAnalysisService = Depends(get_test_case_analysis_service)
):
    """Report missing artifact directories and which artifact files already exist"""
    try:
        project = await analysis.get_project(request.project_id)
    except (ProjectNotFoundError, ProjectPathNotConfiguredError) as e:
        raise _project_error(e)

    return ProjectStructureResponse(
        validation=analysis.validate_project_structure(project, request),
        stats=analysis.get_modification_stats(project, request),
    )
