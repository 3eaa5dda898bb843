import shutil
import time
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import structlog

from app.models.schemas import CodeInsertion, InsertionResult, InsertionStats, ValidationResult

logger = structlog.get_logger()


class CodeInsertionService:
    """Applies insertion descriptors to files on disk"""

    def insert_code(
        self,
        insertions: List[CodeInsertion],
        generation_id: str,
        create_backups: bool = False,
    ) -> InsertionResult:
        """Splice every insertion into its file.

        Descriptors for the same file all refer to the file as it was
        analyzed, so each file is read once and spliced from the bottom up.
        A failing file is reported in ``errors`` and does not stop the others.
        """
        logger.info("Starting code insertion", generation_id=generation_id, total=len(insertions))

        errors: List[str] = []
        by_file: Dict[str, List[Tuple[int, CodeInsertion]]] = {}
        for position, insertion in enumerate(insertions):
            validation = self.validate_insertion(insertion)
            if not validation.is_valid:
                message = f"Invalid insertion {position + 1}: {', '.join(validation.errors)}"
                logger.error("Invalid insertion", generation_id=generation_id, errors=validation.errors)
                errors.append(message)
                continue
            by_file.setdefault(insertion.file, []).append((position, insertion))

        modified_files: List[str] = []
        backups: Dict[str, str] = {}
        for file_path, file_insertions in by_file.items():
            if not Path(file_path).exists():
                message = f"File not found: {file_path}"
                logger.error("File not found", generation_id=generation_id, file_path=file_path)
                errors.append(message)
                continue

            if create_backups:
                backup_path = self.create_backup(file_path, generation_id)
                if backup_path:
                    backups[file_path] = backup_path

            try:
                self._insert_into_file(file_path, file_insertions, generation_id)
            except (OSError, UnicodeDecodeError) as e:
                message = f"Error inserting into {file_path}: {e}"
                logger.error("Error inserting code", generation_id=generation_id, file_path=file_path, error=str(e))
                errors.append(message)
                continue
            modified_files.append(file_path)

        result = InsertionResult(
            success=not errors,
            modified_files=modified_files,
            errors=errors,
            backups=backups,
        )
        logger.info(
            "Insertion completed",
            generation_id=generation_id,
            modified_files=len(modified_files),
            errors=len(errors),
        )
        return result

    def _insert_into_file(
        self,
        file_path: str,
        file_insertions: List[Tuple[int, CodeInsertion]],
        generation_id: str,
    ) -> None:
        path = Path(file_path)
        lines = path.read_text(encoding="utf-8").split("\n")
        original_count = len(lines)

        # Bottom-up keeps every line number valid; on ties the later descriptor
        # goes in first so emission order is kept in the file.
        ordered = sorted(file_insertions, key=lambda item: (item[1].line, item[0]), reverse=True)
        for _, insertion in ordered:
            if insertion.line > original_count:
                # appended in emission order after the bottom-up pass
                continue
            logger.info("Inserting content", generation_id=generation_id, file_path=file_path, line=insertion.line)
            lines.insert(insertion.line - 1, insertion.content)

        for _, insertion in sorted(file_insertions, key=lambda item: item[0]):
            if insertion.line > original_count:
                logger.info("Line past end of file, appending", generation_id=generation_id, file_path=file_path, line=insertion.line)
                lines.append(insertion.content)

        path.write_text("\n".join(lines), encoding="utf-8")
        logger.info("File modified", generation_id=generation_id, file_path=file_path, line_count=len(lines))

    def validate_insertion(self, insertion: CodeInsertion) -> ValidationResult:
        errors = []
        if not insertion.file:
            errors.append("File not specified")
        if not insertion.content:
            errors.append("Content not specified")
        if insertion.line < 1:
            errors.append("Line must be greater than 0")
        if not insertion.type:
            errors.append("Insertion type not specified")
        return ValidationResult(is_valid=not errors, errors=errors)

    def create_backup(self, file_path: str, generation_id: str) -> Optional[str]:
        backup_path = f"{file_path}.backup.{int(time.time() * 1000)}"
        try:
            shutil.copyfile(file_path, backup_path)
        except OSError as e:
            logger.error("Error creating backup", generation_id=generation_id, file_path=file_path, error=str(e))
            return None
        logger.info("Backup created", generation_id=generation_id, backup_path=backup_path)
        return backup_path

    def restore_from_backup(self, backup_path: str, original_path: str, generation_id: str) -> bool:
        try:
            shutil.copyfile(backup_path, original_path)
        except OSError as e:
            logger.error("Error restoring from backup", generation_id=generation_id, backup_path=backup_path, error=str(e))
            return False
        logger.info("File restored from backup", generation_id=generation_id, backup_path=backup_path)
        return True

    def remove_backup(self, backup_path: str, generation_id: str) -> bool:
        try:
            Path(backup_path).unlink()
        except OSError as e:
            logger.error("Error removing backup", generation_id=generation_id, backup_path=backup_path, error=str(e))
            return False
        logger.info("Backup removed", generation_id=generation_id, backup_path=backup_path)
        return True

    def get_insertion_stats(self, insertions: List[CodeInsertion]) -> InsertionStats:
        by_type = Counter(insertion.type.value for insertion in insertions)
        files = list(dict.fromkeys(insertion.file for insertion in insertions))
        return InsertionStats(total=len(insertions), by_type=dict(by_type), files=files)
