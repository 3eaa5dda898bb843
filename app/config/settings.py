from pydantic_settings import BaseSettings
from app.models.schemas import DuplicateCheckErrorPolicy


class Settings(BaseSettings):
    # API Configuration
    debug: bool = False
    environment: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"

    # Database Configuration
    database_url: str = "sqlite:///./data/testcase_platform.db"

    # Code insertion
    # What to do when the duplicate-step check itself fails (unreadable file, bad regex).
    # insert-anyway keeps generation flowing; skip-insert never risks a duplicate step.
    duplicate_check_error_policy: DuplicateCheckErrorPolicy = DuplicateCheckErrorPolicy.INSERT_ANYWAY
    create_insertion_backups: bool = False

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
