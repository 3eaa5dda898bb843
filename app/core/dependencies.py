from functools import lru_cache
from fastapi import Depends
from sqlalchemy.orm import Session
from app.config.settings import settings
from app.repositories.interfaces.project_repository import IProjectRepository
from app.repositories.implementations.sql_project_repository import SQLProjectRepository

from app.services.code_manipulation.code_insertion import CodeInsertionService
from app.services.code_manipulation.feature_files import FeatureFilesManipulationService
from app.services.code_manipulation.step_files import StepFilesManipulationService
from app.services.code_manipulation.test_case_analysis import TestCaseAnalysisService
from app.core.database import get_database


class Container:
    """Dependency injection container"""

    def project_repository(self, db: Session) -> IProjectRepository:
        """Get project repository instance"""
        return SQLProjectRepository(db)

    @lru_cache()
    def step_files_service(self) -> StepFilesManipulationService:
        """Get step file service instance (singleton)"""
        return StepFilesManipulationService(
            duplicate_check_error_policy=settings.duplicate_check_error_policy
        )

    @lru_cache()
    def feature_files_service(self) -> FeatureFilesManipulationService:
        """Get feature file service instance (singleton)"""
        return FeatureFilesManipulationService()

    @lru_cache()
    def code_insertion_service(self) -> CodeInsertionService:
        """Get code insertion service instance (singleton)"""
        return CodeInsertionService()

    def test_case_analysis_service(self, db: Session) -> TestCaseAnalysisService:
        """Get test case analysis service instance"""
        return TestCaseAnalysisService(
            project_repository=self.project_repository(db),
            step_files_service=self.step_files_service(),
            feature_files_service=self.feature_files_service(),
        )


# Global container instance
container = Container()


# Dependency providers for FastAPI
def get_project_repository(db: Session = Depends(get_database)) -> IProjectRepository:
    """FastAPI dependency for project repository"""
    return container.project_repository(db)


def get_code_insertion_service() -> CodeInsertionService:
    """FastAPI dependency for code insertion service"""
    return container.code_insertion_service()


def get_test_case_analysis_service(db: Session = Depends(get_database)) -> TestCaseAnalysisService:
    """FastAPI dependency for test case analysis service"""
    return container.test_case_analysis_service(db)
