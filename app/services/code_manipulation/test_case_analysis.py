from pathlib import Path
from typing import Dict, List, Optional, Tuple

import structlog

from app.core.exceptions import ProjectNotFoundError, ProjectPathNotConfiguredError
from app.models.schemas import (
    CodeInsertion,
    GeneratedCode,
    GenerationRequest,
    ModificationStats,
    Project,
    ValidationResult,
)
from app.repositories.interfaces.project_repository import IProjectRepository
from app.services.code_manipulation.feature_files import FeatureFilesManipulationService
from app.services.code_manipulation.step_files import StepFilesManipulationService

logger = structlog.get_logger()

# artifact kind -> (directory under src/, file name template)
ARTIFACT_LOCATIONS: Dict[str, Tuple[str, str]] = {
    "feature": ("features", "{entity}.feature"),
    "steps": ("steps", "{entity}.steps.ts"),
    "fixtures": ("fixtures", "{entity}.fixture.ts"),
    "schemas": ("schemas", "{entity}.schema.ts"),
    "types": ("types", "{entity}.ts"),
    "client": ("api", "{entity}Client.ts"),
}


def artifact_path(project_root: str, section: str, entity_name: str, kind: str) -> str:
    directory, file_template = ARTIFACT_LOCATIONS[kind]
    file_name = file_template.format(entity=entity_name.lower())
    return str(Path(project_root) / "src" / directory / section / file_name)


class TestCaseAnalysisService:
    """Decides which insertions a generated test case needs across a project's files"""

    __test__ = False

    def __init__(
        self,
        project_repository: IProjectRepository,
        step_files_service: StepFilesManipulationService,
        feature_files_service: FeatureFilesManipulationService,
    ):
        self.project_repository = project_repository
        self.step_files_service = step_files_service
        self.feature_files_service = feature_files_service

    async def analyze_and_determine_insertions(
        self,
        request: GenerationRequest,
        new_code: GeneratedCode,
        generation_id: str,
    ) -> List[CodeInsertion]:
        """Fan the generated artifacts out to their analyzers.

        Raises ProjectNotFoundError before touching any file when the project
        is unknown. Insertions come back in the order feature, steps
        (given, when, then), fixtures, schemas, types, client.
        """
        logger.info("Analyzing existing files", generation_id=generation_id, project_id=request.project_id)

        project = await self.get_project(request.project_id)
        logger.info("Project found", generation_id=generation_id, project=project.name, project_path=project.path)

        insertions: List[CodeInsertion] = []

        if new_code.feature:
            feature_insertion = self._analyze_feature_insertion(project, request, new_code.feature, generation_id)
            if feature_insertion:
                insertions.append(feature_insertion)
        else:
            logger.info("No feature code to analyze", generation_id=generation_id)

        if new_code.steps:
            insertions.extend(self._analyze_steps_insertion(project, request, new_code.steps, generation_id))
        else:
            logger.info("No steps code to analyze", generation_id=generation_id)

        for kind in ("fixtures", "schemas", "types", "client"):
            code = getattr(new_code, kind)
            if not code:
                continue
            insertion = self._analyze_pending_artifact(project, request, kind, code, generation_id)
            if insertion:
                insertions.append(insertion)

        logger.info("Insertions determined", generation_id=generation_id, total=len(insertions))
        return insertions

    async def get_project(self, project_id: str) -> Project:
        project = await self.project_repository.get_by_id(project_id)
        if not project:
            raise ProjectNotFoundError(project_id)
        if not project.path:
            raise ProjectPathNotConfiguredError(project_id)
        return project

    def _analyze_feature_insertion(
        self,
        project: Project,
        request: GenerationRequest,
        feature_code: str,
        generation_id: str,
    ) -> Optional[CodeInsertion]:
        feature_path = artifact_path(project.path, request.section, request.entity_name, "feature")
        logger.info("Feature file path", generation_id=generation_id, file_path=feature_path, exists=Path(feature_path).exists())
        return self.feature_files_service.analyze_feature_file(feature_path, feature_code, generation_id)

    def _analyze_steps_insertion(
        self,
        project: Project,
        request: GenerationRequest,
        steps_code: str,
        generation_id: str,
    ) -> List[CodeInsertion]:
        steps_path = artifact_path(project.path, request.section, request.entity_name, "steps")
        logger.info("Step file path", generation_id=generation_id, file_path=steps_path, exists=Path(steps_path).exists())
        return self.step_files_service.analyze_steps_file(steps_path, steps_code, generation_id)

    def _analyze_pending_artifact(
        self,
        project: Project,
        request: GenerationRequest,
        kind: str,
        code: str,
        generation_id: str,
    ) -> Optional[CodeInsertion]:
        # Extension point: fixtures, schemas, types and client have no analyzer yet
        file_path = artifact_path(project.path, request.section, request.entity_name, kind)
        logger.info(
            "Artifact analysis not implemented yet",
            generation_id=generation_id,
            artifact=kind,
            file_path=file_path,
            code_length=len(code),
        )
        return None

    def validate_project_structure(self, project: Project, request: GenerationRequest) -> ValidationResult:
        """Check that every artifact directory of the request's section exists"""
        errors = []
        for directory, _ in ARTIFACT_LOCATIONS.values():
            section_dir = Path(project.path) / "src" / directory / request.section
            if not section_dir.is_dir():
                errors.append(f"Directory not found: {section_dir}")
        return ValidationResult(is_valid=not errors, errors=errors)

    def get_modification_stats(self, project: Project, request: GenerationRequest) -> ModificationStats:
        def exists(kind: str) -> bool:
            return Path(artifact_path(project.path, request.section, request.entity_name, kind)).exists()

        return ModificationStats(
            feature_exists=exists("feature"),
            steps_exists=exists("steps"),
            fixtures_exists=exists("fixtures"),
            schemas_exists=exists("schemas"),
            types_exists=exists("types"),
            client_exists=exists("client"),
        )
