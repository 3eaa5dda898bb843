import re
from pathlib import Path
from typing import List, Optional

import structlog

from app.models.schemas import (
    BackgroundLocation,
    CodeInsertion,
    InsertionType,
    ScenarioLocation,
    ValidationResult,
)
from app.services.code_manipulation.lines import LineKind, TextLines

logger = structlog.get_logger()

TEST_CASE_TAG = re.compile(r"@TC-\S+")


class FeatureFilesManipulationService:
    """Gherkin feature file handling for generated scenarios"""

    def analyze_feature_file(self, file_path: str, new_feature_code: str, generation_id: str) -> Optional[CodeInsertion]:
        """Find where a generated scenario goes in an existing feature file.

        Returns None when the file does not exist or when the scenario's
        ``@TC-`` tag is already present in it. Otherwise the scenario is
        placed after the body of the last scenario, after the Background
        block when there are no scenarios, or at the end of the file.
        """
        logger.info("Analyzing feature file", generation_id=generation_id, file_path=file_path)

        path = Path(file_path)
        if not path.exists():
            logger.info("Feature file does not exist", generation_id=generation_id, file_path=file_path)
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading feature file", generation_id=generation_id, file_path=file_path, error=str(e))
            return None
        lines = TextLines.from_text(content)
        logger.info("Feature file read", generation_id=generation_id, line_count=len(lines))

        tag_match = TEST_CASE_TAG.search(new_feature_code)
        if tag_match:
            test_case_id = tag_match.group(0)
            if test_case_id in content:
                logger.warning("Test case already exists in file, will not insert", generation_id=generation_id, test_case_id=test_case_id)
                return None

        last_scenario_line = self._find_last_scenario_line(lines, generation_id)
        if last_scenario_line >= 0:
            insert_line = lines.skip_non_blank(last_scenario_line + 1)
        else:
            insert_line = self._find_insertion_after_background(lines, generation_id)

        logger.info(
            "Feature insertion line determined",
            generation_id=generation_id,
            line=insert_line + 1,
            preview=new_feature_code[:100],
        )
        return CodeInsertion(
            file=file_path,
            line=insert_line + 1,
            content="\n" + new_feature_code,
            type=InsertionType.SCENARIO,
            description="Insert new scenario after the last existing one",
        )

    def _find_last_scenario_line(self, lines: TextLines, generation_id: str) -> int:
        index = lines.find_last(lambda line: line.kind is LineKind.SCENARIO_HEADER)
        if index >= 0:
            logger.info("Last scenario found", generation_id=generation_id, line=index + 1, scenario=lines[index].stripped)
        else:
            logger.info("No scenarios found in file", generation_id=generation_id)
        return index

    def _find_insertion_after_background(self, lines: TextLines, generation_id: str) -> int:
        background_line = lines.find_first(lambda line: line.kind is LineKind.BACKGROUND_HEADER)
        if background_line < 0:
            logger.info("No Background found, inserting at end of file", generation_id=generation_id)
            return len(lines)

        insert_line = lines.skip_non_blank(background_line + 1)
        logger.info("Background found", generation_id=generation_id, line=background_line + 1, insert_line=insert_line + 1)
        return insert_line

    def scenario_exists(self, file_path: str, scenario_name: str) -> bool:
        content = self.get_feature_content(file_path)
        if content is None:
            return False
        return any(scenario_name in line.strip() for line in content.split("\n"))

    def get_feature_content(self, file_path: str) -> Optional[str]:
        path = Path(file_path)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_feature_content(self, file_path: str, content: str) -> None:
        Path(file_path).write_text(content, encoding="utf-8")

    def find_all_scenarios(self, file_path: str) -> List[ScenarioLocation]:
        content = self.get_feature_content(file_path)
        if content is None:
            return []
        return [
            ScenarioLocation(line=line.number, name=line.stripped[len("Scenario:"):].strip())
            for line in TextLines.from_text(content)
            if line.kind is LineKind.SCENARIO_HEADER
        ]

    def find_background(self, file_path: str) -> Optional[BackgroundLocation]:
        content = self.get_feature_content(file_path)
        if content is None:
            return None
        lines = TextLines.from_text(content)
        index = lines.find_first(lambda line: line.kind is LineKind.BACKGROUND_HEADER)
        if index < 0:
            return None
        return BackgroundLocation(line=index + 1, content=lines[index].stripped)

    def validate_feature_structure(self, file_path: str) -> ValidationResult:
        content = self.get_feature_content(file_path)
        if content is None:
            return ValidationResult(is_valid=False, errors=["File does not exist"])

        kinds = {line.kind for line in TextLines.from_text(content)}
        errors = []
        if LineKind.FEATURE_HEADER not in kinds:
            errors.append("Feature declaration not found")
        if LineKind.SCENARIO_HEADER not in kinds:
            errors.append("No scenarios found")
        return ValidationResult(is_valid=not errors, errors=errors)
