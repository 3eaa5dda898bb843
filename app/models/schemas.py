from pydantic import AliasChoices, BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime
from enum import Enum


class ProjectStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class ProjectType(str, Enum):
    PLAYWRIGHT_BDD = "playwright-bdd"
    API_ONLY = "api-only"


class InsertionType(str, Enum):
    SCENARIO = "scenario"
    STEP = "step"
    TEST = "test"
    FIXTURE = "fixture"
    SCHEMA = "schema"
    TYPE = "type"
    CLIENT = "client"


class GenerationOperation(str, Enum):
    ADD_SCENARIO = "add-scenario"
    MODIFY_SCENARIO = "modify-scenario"
    CREATE_NEW = "create-new"


class DuplicateCheckErrorPolicy(str, Enum):
    SKIP_INSERT = "skip-insert"
    INSERT_ANYWAY = "insert-anyway"


class ProjectBase(BaseModel):
    name: str = Field(..., description="Unique project name, also used as workspace name")
    display_name: Optional[str] = Field(None, description="Human readable project name")
    description: str = Field(default="", description="Project description")
    base_url: str = Field(..., description="Base URL of the API under test")
    base_path: str = Field(default="/v1/api", description="Base path for API endpoints")
    tags: List[str] = Field(default_factory=list)
    type: ProjectType = Field(default=ProjectType.PLAYWRIGHT_BDD)
    path: Optional[str] = Field(None, description="Absolute path of the project workspace")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Version, environment, framework...")


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    display_name: Optional[str] = None
    description: Optional[str] = None
    base_url: Optional[str] = None
    base_path: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[ProjectStatus] = None
    type: Optional[ProjectType] = None
    path: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class Project(ProjectBase):
    id: str
    status: ProjectStatus = ProjectStatus.PENDING
    # The ORM attribute can't be called "metadata" (reserved by SQLAlchemy)
    metadata: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("project_metadata", "metadata")
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GenerationRequest(BaseModel):
    project_id: str = Field(..., description="Project owning the target files")
    entity_name: str = Field(..., description="Entity the test case belongs to, e.g. Product")
    section: str = Field(..., description="Section folder inside each artifact directory")
    operation: GenerationOperation = Field(default=GenerationOperation.ADD_SCENARIO)
    requirements: str = Field(default="", description="Free-form requirements given to the generator")
    metadata: Optional[Dict[str, Any]] = None


class GeneratedCode(BaseModel):
    feature: Optional[str] = None
    steps: Optional[str] = None
    tests: Optional[str] = None
    fixtures: Optional[str] = None
    schemas: Optional[str] = None
    types: Optional[str] = None
    client: Optional[str] = None


class CodeInsertion(BaseModel):
    file: str = Field(..., description="Absolute path of the file to modify")
    line: int = Field(..., description="1-based line number in the original file content")
    content: str = Field(..., description="Text to splice in, starting with a newline")
    type: InsertionType
    description: str = ""


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)


class InsertionResult(BaseModel):
    success: bool
    modified_files: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    backups: Dict[str, str] = Field(default_factory=dict)


class InsertionStats(BaseModel):
    total: int
    by_type: Dict[str, int] = Field(default_factory=dict)
    files: List[str] = Field(default_factory=list)


class ModificationStats(BaseModel):
    feature_exists: bool
    steps_exists: bool
    fixtures_exists: bool
    schemas_exists: bool
    types_exists: bool
    client_exists: bool


class ScenarioLocation(BaseModel):
    line: int
    name: str


class BackgroundLocation(BaseModel):
    line: int
    content: str


class AnalyzeInsertionsRequest(BaseModel):
    request: GenerationRequest
    generated_code: GeneratedCode
    generation_id: Optional[str] = Field(None, description="Correlation id used in logs; generated when omitted")


class AnalyzeInsertionsResponse(BaseModel):
    generation_id: str
    insertions: List[CodeInsertion] = Field(default_factory=list)
    stats: InsertionStats


class ApplyInsertionsRequest(BaseModel):
    insertions: List[CodeInsertion]
    generation_id: Optional[str] = None
    create_backups: Optional[bool] = Field(None, description="Overrides the configured backup behaviour")


class ProjectStructureResponse(BaseModel):
    validation: ValidationResult
    stats: ModificationStats
