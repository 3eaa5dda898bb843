"""
Line model shared by the feature and step file analyzers.

A file is read once and turned into an immutable tuple of classified lines.
Every resolution policy (markers, last scenario, last step of a type, blank
line after a block) is then a scan over line kinds instead of ad hoc string
checks spread across services.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Sequence, Tuple


class LineKind(str, Enum):
    MARKER = "marker"
    FEATURE_HEADER = "feature_header"
    SCENARIO_HEADER = "scenario_header"
    BACKGROUND_HEADER = "background_header"
    STEP_STATEMENT = "step_statement"
    BLANK = "blank"
    OTHER = "other"


class StepKeyword(str, Enum):
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"

    @property
    def statement_prefix(self) -> str:
        return f"{self.value}("

    @property
    def slot(self) -> str:
        return self.value.lower()


class SectionMarker(str, Enum):
    BEGINNING_OF_WHEN = "// Beginning of When steps"
    END_OF_THEN = "// End of Then steps"
    END_OF_GIVEN = "// End of Given steps"
    END_OF_WHEN = "// End of When steps"


_MARKERS = {marker.value: marker for marker in SectionMarker}

_HEADER_PREFIXES = (
    ("Feature:", LineKind.FEATURE_HEADER),
    ("Scenario:", LineKind.SCENARIO_HEADER),
    ("Background:", LineKind.BACKGROUND_HEADER),
)


@dataclass(frozen=True)
class Line:
    index: int
    text: str
    kind: LineKind
    keyword: Optional[StepKeyword] = None
    marker: Optional[SectionMarker] = None

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def stripped(self) -> str:
        return self.text.strip()

    def is_step(self, keyword: StepKeyword) -> bool:
        return self.kind is LineKind.STEP_STATEMENT and self.keyword is keyword


def classify_line(index: int, text: str) -> Line:
    """Tag a raw line with its kind.

    Markers must match exactly once trimmed; headers and step statements are
    recognized by prefix.
    """
    stripped = text.strip()
    if not stripped:
        return Line(index, text, LineKind.BLANK)

    marker = _MARKERS.get(stripped)
    if marker is not None:
        return Line(index, text, LineKind.MARKER, marker=marker)

    for keyword in StepKeyword:
        if stripped.startswith(keyword.statement_prefix):
            return Line(index, text, LineKind.STEP_STATEMENT, keyword=keyword)

    for prefix, kind in _HEADER_PREFIXES:
        if stripped.startswith(prefix):
            return Line(index, text, kind)

    return Line(index, text, LineKind.OTHER)


class TextLines:
    """Immutable, classified view over the lines of a text."""

    def __init__(self, raw_lines: Sequence[str]):
        self._lines: Tuple[Line, ...] = tuple(
            classify_line(index, text) for index, text in enumerate(raw_lines)
        )

    @classmethod
    def from_text(cls, content: str) -> "TextLines":
        # split("\n") keeps a trailing empty line, so "a\n" has two lines
        return cls(content.split("\n"))

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self._lines)

    def __getitem__(self, index: int) -> Line:
        return self._lines[index]

    def find_first(self, predicate: Callable[[Line], bool], start: int = 0) -> int:
        """Index of the first matching line at or after ``start``, or -1."""
        for line in self._lines[start:]:
            if predicate(line):
                return line.index
        return -1

    def find_last(self, predicate: Callable[[Line], bool]) -> int:
        """Index of the last matching line, or -1."""
        for line in reversed(self._lines):
            if predicate(line):
                return line.index
        return -1

    def skip_non_blank(self, start: int) -> int:
        """Advance from ``start`` past non-blank lines.

        Returns the index of the first blank line, or the line count.
        """
        index = start
        while index < len(self._lines) and self._lines[index].kind is not LineKind.BLANK:
            index += 1
        return index
