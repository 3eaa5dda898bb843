from pathlib import Path
from typing import Generator
import tempfile

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session

from app.config.settings import settings
from app.models.database import Base

logger = structlog.get_logger()


def _create_engine_from_url(db_url: str):
    connect_args = {"check_same_thread": False} if "sqlite" in db_url else {}
    return create_engine(db_url, connect_args=connect_args)


def _resolve_database_url(original_url: str) -> str:
    """Make sure a sqlite database directory exists and is writable.

    Falls back to a file in the system temp directory when it isn't, so a
    read-only checkout can still boot the service.
    """
    try:
        url = make_url(original_url)
    except Exception as e:
        logger.debug("Failed to parse database url", error=str(e), original=original_url)
        return original_url

    if not (url.drivername and url.drivername.startswith("sqlite") and url.database):
        return original_url
    if url.database == ":memory:":
        return original_url

    db_path = Path(url.database)
    if not db_path.is_absolute():
        db_path = (Path.cwd() / db_path).resolve()
    logger.info("Resolved sqlite path", resolved=str(db_path), original=original_url)

    db_dir = db_path.parent
    try:
        db_dir.mkdir(parents=True, exist_ok=True)
        probe = db_dir / ".writable_test"
        probe.write_text("ok")
        probe.unlink()
        return original_url
    except OSError as e:
        logger.error("Configured sqlite path not writable; falling back to temp file", error=str(e), path=str(db_path))
        fallback = f"sqlite:///{(Path(tempfile.gettempdir()) / 'testcase_platform_fallback.db').as_posix()}"
        logger.info("Using fallback sqlite path", fallback=fallback)
        return fallback


resolved_db_url = _resolve_database_url(settings.database_url)
engine = _create_engine_from_url(resolved_db_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_database() -> Generator[Session, None, None]:
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create all database tables"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error("Failed to create database tables", error=str(e))
        raise
