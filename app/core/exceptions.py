class CodeManipulationError(Exception):
    """Base error for failures that abort a whole insertion batch"""


class ProjectNotFoundError(CodeManipulationError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project with ID {project_id} not found")


class ProjectPathNotConfiguredError(CodeManipulationError):
    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project with ID {project_id} has no workspace path configured")
