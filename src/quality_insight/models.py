"""Data models for Quality Insight"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class IssueCategory(str, Enum):
    RUNTIME = "runtime"
    EXCEPTION = "exception"
    STRUCTURE = "structure"
    READABILITY = "readability"
    NAMING = "naming"


class Severity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"
    BLOCKER = "blocker"

    @property
    def is_major(self) -> bool:
        """Counted as a major violation (major, critical and blocker)."""
        return self is not Severity.MINOR

    @property
    def is_critical(self) -> bool:
        return self in (Severity.CRITICAL, Severity.BLOCKER)


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


RELIABILITY_CATEGORIES = (IssueCategory.RUNTIME, IssueCategory.EXCEPTION)
MAINTAINABILITY_CATEGORIES = (
    IssueCategory.STRUCTURE,
    IssueCategory.READABILITY,
    IssueCategory.NAMING,
)


@dataclass(frozen=True)
class SourceUnit:
    """The text being analyzed plus its language hint."""

    text: str
    language_tag: str = "generic"


@dataclass(frozen=True)
class Issue:
    """One detected problem.

    ``context`` holds tags describing the code around the line
    (``try``, ``conditional``, ``test``, ``util``); the aggregator turns them
    into discount factors.
    """

    category: IssueCategory
    severity: Severity
    description: str
    line: Optional[int] = None
    remediation_minutes: int = 0
    rule: str = ""
    context: Tuple[str, ...] = ()
    snippet: str = ""


@dataclass(frozen=True)
class FunctionSpan:
    """A detected function and the lines it covers (1-based, inclusive)."""

    name: str
    start_line: int
    end_line: int
    parameters: Tuple[str, ...] = ()
    nullable_parameters: Tuple[str, ...] = ()

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


@dataclass(frozen=True)
class DuplicateBlock:
    """A window of lines repeating an earlier window."""

    first_line: int
    duplicate_line: int
    length: int


@dataclass(frozen=True)
class Metrics:
    """Raw counts for a source unit. Every value is finite."""

    total_lines: int = 0
    lines_of_code: int = 0
    comment_lines: int = 0
    comment_ratio: float = 0.0
    function_count: int = 0
    class_count: int = 0
    average_function_length: float = 0.0
    max_function_length: int = 0
    cyclomatic_complexity_raw: int = 1
    adjusted_complexity: float = 1.0
    max_nesting_depth: int = 0
    duplicated_lines: int = 0
    duplication_percent: float = 0.0
    documentation_coverage_percent: float = 0.0


@dataclass(frozen=True)
class Rating:
    """A letter grade with its explanation."""

    grade: Grade
    score: float
    description: str
    reason: str
    issues: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    warning_flag: bool = False


@dataclass(frozen=True)
class LineReference:
    line: int
    issue: str
    severity: Severity


@dataclass(frozen=True)
class Violations:
    """Counts of major/minor problems plus per-line references."""

    major: int = 0
    minor: int = 0
    details: List[str] = field(default_factory=list)
    line_references: List[LineReference] = field(default_factory=list)


@dataclass(frozen=True)
class TechnicalDebt:
    total_minutes: int
    debt_ratio_percent: float
    grade: Grade
    estimated_development_minutes: int


@dataclass(frozen=True)
class AnalysisReport:
    """Final analysis output; read-only for every consumer."""

    language: str
    complexity: Rating
    maintainability: Rating
    reliability: Rating
    metrics: Metrics
    violations: Violations
    technical_debt: TechnicalDebt
    issues: Tuple[Issue, ...] = ()
    issue_categories: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation with stable snake_case keys."""
        return asdict(self, dict_factory=_enum_safe_dict)


def _enum_safe_dict(items: List[Tuple[str, Any]]) -> Dict[str, Any]:
    return {key: _plain(value) for key, value in items}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value
