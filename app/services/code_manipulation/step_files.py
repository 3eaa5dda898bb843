import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from app.models.schemas import CodeInsertion, DuplicateCheckErrorPolicy, InsertionType
from app.services.code_manipulation.lines import LineKind, SectionMarker, StepKeyword, TextLines

logger = structlog.get_logger()

# Lines of generated code that never belong to a step block
_SKIPPED_PREFIXES = ("import ", "// steps/", "// features/")

# Each fragment also accepts the placeholder itself, so a step registered as
# "price {int}" and one generated as "price 330" share a signature.
_PLACEHOLDERS = {
    "{int}": r"(?:\d+|\{int\})",
    "{string}": r"[^\s]+",
    "{float}": r"(?:\d+\.\d+|\{float\})",
}
_DIGIT_RUN = r"(?:\d+|\{int\})"
_NORMALIZE_TOKENS = re.compile(r"(\{int\}|\{string\}|\{float\}|\d+)")

_STEP_TEXT_PATTERNS = {
    keyword: re.compile(keyword.value + r"\(['\"`]([^'\"`]+)['\"`]")
    for keyword in StepKeyword
}


@dataclass(frozen=True)
class StepBlocks:
    given: Optional[str] = None
    when: Optional[str] = None
    then: Optional[str] = None

    def get(self, keyword: StepKeyword) -> Optional[str]:
        return getattr(self, keyword.slot)


@dataclass(frozen=True)
class SectionComments:
    when_comment_line: int = -1
    then_comment_line: int = -1
    given_end_line: int = -1
    when_end_line: int = -1

    def end_line_for(self, keyword: StepKeyword) -> int:
        """Marker that closes the section of ``keyword``, or -1."""
        if keyword is StepKeyword.GIVEN:
            return self.given_end_line
        if keyword is StepKeyword.WHEN:
            return self.when_end_line
        return self.then_comment_line


def parse_step_blocks(steps_code: str) -> StepBlocks:
    """Split generated step code into its Given, When and Then blocks.

    Each block runs from its ``Given(``/``When(``/``Then(`` line up to the
    next one. Lines before the first statement are dropped, and a second
    block of the same keyword replaces the first.
    """
    blocks: Dict[str, str] = {}
    current: Optional[StepKeyword] = None
    content: List[str] = []

    for raw in steps_code.split("\n"):
        stripped = raw.strip()
        if stripped.startswith(_SKIPPED_PREFIXES):
            continue

        keyword = next((k for k in StepKeyword if stripped.startswith(k.statement_prefix)), None)
        if keyword is not None:
            if current is not None and content:
                blocks[current.slot] = "\n".join(content)
            current = keyword
            content = [raw]
        elif current is not None:
            content.append(raw)

    if current is not None and content:
        blocks[current.slot] = "\n".join(content)

    return StepBlocks(**blocks)


def find_section_comments(lines: TextLines, generation_id: str = "-") -> SectionComments:
    """Locate the four section marker comments of a step file."""
    found = {marker: -1 for marker in SectionMarker}
    for line in lines:
        if line.kind is LineKind.MARKER:
            found[line.marker] = line.index
            logger.info("Section comment found", generation_id=generation_id, comment=line.marker.value, line=line.number)

    comments = SectionComments(
        when_comment_line=found[SectionMarker.BEGINNING_OF_WHEN],
        then_comment_line=found[SectionMarker.END_OF_THEN],
        given_end_line=found[SectionMarker.END_OF_GIVEN],
        when_end_line=found[SectionMarker.END_OF_WHEN],
    )
    logger.info(
        "Section comments located",
        generation_id=generation_id,
        beginning_of_when=comments.when_comment_line,
        end_of_given=comments.given_end_line,
        end_of_when=comments.when_end_line,
        end_of_then=comments.then_comment_line,
    )
    return comments


def normalize_step_pattern(step_pattern: str) -> str:
    """Turn step text into a regex that ignores concrete parameter values.

    ``{int}``, ``{string}`` and ``{float}`` become permissive fragments and
    every digit run matches any digit run (or ``{int}``); everything else is
    matched literally.
    """
    parts = []
    for token in _NORMALIZE_TOKENS.split(step_pattern):
        if token in _PLACEHOLDERS:
            parts.append(_PLACEHOLDERS[token])
        elif token.isdigit():
            parts.append(_DIGIT_RUN)
        else:
            parts.append(re.escape(token))
    return "".join(parts)


def step_signature_regex(step_pattern: str) -> "re.Pattern[str]":
    normalized = normalize_step_pattern(step_pattern)
    return re.compile(r"(?:Given|When|Then|And|But)\(['\"`][^'\"`]*" + normalized + r"[^'\"`]*['\"`]")


def extract_step_text(block: str, keyword: StepKeyword) -> Optional[str]:
    match = _STEP_TEXT_PATTERNS[keyword].search(block)
    return match.group(1) if match else None


class StepFilesManipulationService:
    """Finds where generated Given/When/Then steps go inside a step definition file"""

    def __init__(self, duplicate_check_error_policy: DuplicateCheckErrorPolicy = DuplicateCheckErrorPolicy.INSERT_ANYWAY):
        self.duplicate_check_error_policy = DuplicateCheckErrorPolicy(duplicate_check_error_policy)

    def analyze_steps_file(self, file_path: str, new_steps_code: str, generation_id: str) -> List[CodeInsertion]:
        """Work out the insertions needed to add the generated steps to a step file.

        The file is read once; every insertion line refers to that original
        content. Steps already present in the file are skipped.
        """
        logger.info("Analyzing step file", generation_id=generation_id, file_path=file_path)

        path = Path(file_path)
        if not path.exists():
            logger.info("Step file does not exist", generation_id=generation_id, file_path=file_path)
            return []

        try:
            lines = TextLines.from_text(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading step file", generation_id=generation_id, file_path=file_path, error=str(e))
            return []
        logger.info("Step file read", generation_id=generation_id, line_count=len(lines))

        section_comments = find_section_comments(lines, generation_id)
        step_blocks = parse_step_blocks(new_steps_code)
        logger.info(
            "Step blocks parsed",
            generation_id=generation_id,
            given=step_blocks.given is not None,
            when=step_blocks.when is not None,
            then=step_blocks.then is not None,
        )

        insertions: List[CodeInsertion] = []
        for keyword in StepKeyword:
            block = step_blocks.get(keyword)
            if not block:
                continue

            step_pattern = extract_step_text(block, keyword)
            if step_pattern and self.step_exists(file_path, step_pattern):
                logger.warning("Step already exists", generation_id=generation_id, keyword=keyword.value, step=step_pattern)
                continue

            insert_index = self._resolve_insertion_index(lines, keyword, section_comments, generation_id)
            insertions.append(
                CodeInsertion(
                    file=file_path,
                    line=insert_index + 1,
                    content="\n" + block,
                    type=InsertionType.STEP,
                    description=f"Insert new {keyword.value}",
                )
            )

        logger.info(
            "Step insertions determined",
            generation_id=generation_id,
            total=len(insertions),
            lines=[insertion.line for insertion in insertions],
        )
        return insertions

    def _resolve_insertion_index(
        self,
        lines: TextLines,
        keyword: StepKeyword,
        section_comments: SectionComments,
        generation_id: str,
    ) -> int:
        marker_line = section_comments.end_line_for(keyword)
        if marker_line >= 0:
            logger.info("Inserting before section end comment", generation_id=generation_id, keyword=keyword.value, line=marker_line + 1)
            return marker_line

        last_step_line = self.find_last_step_of_type(lines, keyword, generation_id)
        if last_step_line >= 0:
            logger.info("Inserting after last existing step", generation_id=generation_id, keyword=keyword.value, line=last_step_line + 2)
            return last_step_line + 1

        logger.info("Inserting at end of file", generation_id=generation_id, keyword=keyword.value, line=len(lines) + 1)
        return len(lines)

    def find_last_step_of_type(self, lines: TextLines, keyword: StepKeyword, generation_id: str = "-") -> int:
        index = lines.find_last(lambda line: line.is_step(keyword))
        if index < 0:
            logger.warning("No existing step of type found", generation_id=generation_id, keyword=keyword.value)
        return index

    def find_end_of_step_block(self, lines: TextLines, start_line: int) -> int:
        """Index of the first step statement after ``start_line``, or the line count."""
        index = lines.find_first(lambda line: line.kind is LineKind.STEP_STATEMENT, start_line + 1)
        return index if index >= 0 else len(lines)

    def step_exists(self, file_path: str, step_pattern: str) -> bool:
        """Whether the file already defines a step matching ``step_pattern``.

        Concrete numbers and typed placeholders are treated as wildcards on
        both sides. Errors while checking are resolved by the duplicate check
        error policy.
        """
        path = Path(file_path)
        if not path.exists():
            return False

        try:
            content = path.read_text(encoding="utf-8")
            regex = step_signature_regex(step_pattern)
        except (OSError, UnicodeDecodeError, re.error) as e:
            skip = self.duplicate_check_error_policy is DuplicateCheckErrorPolicy.SKIP_INSERT
            logger.warning(
                "Error checking existing step",
                file_path=file_path,
                step=step_pattern,
                error=str(e),
                policy=self.duplicate_check_error_policy.value,
            )
            return skip

        exists = regex.search(content) is not None
        if exists:
            logger.info("Duplicate step detected", step=step_pattern, pattern=regex.pattern)
        return exists

    def get_steps_content(self, file_path: str) -> Optional[str]:
        path = Path(file_path)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_steps_content(self, file_path: str, content: str) -> None:
        Path(file_path).write_text(content, encoding="utf-8")
