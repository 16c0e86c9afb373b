"""Grade mapping: scores to letter grades with canned explanations."""

from typing import Dict, Iterable, List, Sequence, Tuple

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..math import clamp_score, is_finite_number
from ..models import Grade, Issue, IssueCategory, Rating
from .aggregator import AggregationResult

logger = get_logger(__name__)

# Rating.issues keeps the most costly groups only.
MAX_RATING_ISSUES = 10

IMPROVEMENTS: Dict[IssueCategory, str] = {
    IssueCategory.RUNTIME: "Add validation checks before divisions, index access and dereferences",
    IssueCategory.EXCEPTION: "Wrap parsing, file and network operations in error handling",
    IssueCategory.STRUCTURE: "Split long or deeply nested functions into smaller units",
    IssueCategory.READABILITY: "Replace magic numbers with named constants and document public code",
    IssueCategory.NAMING: "Use descriptive, consistently styled names",
}

COMPLEXITY_TEXT: Dict[Grade, Tuple[str, List[str]]] = {
    Grade.A: ("Low complexity", []),
    Grade.B: (
        "Moderate complexity",
        ["Extract complex conditions into well-named helper functions"],
    ),
    Grade.C: (
        "High complexity",
        [
            "Break large functions into smaller ones",
            "Replace nested conditionals with early returns",
        ],
    ),
    Grade.D: (
        "Very high complexity",
        [
            "Refactor into smaller functions with a single responsibility",
            "Replace branching chains with lookup tables or polymorphism",
            "Reduce nesting with guard clauses",
        ],
    ),
}

MAINTAINABILITY_TEXT: Dict[Grade, Tuple[str, List[str]]] = {
    Grade.A: ("Highly maintainable", []),
    Grade.B: ("Maintainable", ["Add comments where intent is not obvious"]),
    Grade.C: (
        "Needs attention",
        ["Reduce function length and nesting", "Document functions and classes"],
    ),
    Grade.D: (
        "Hard to maintain",
        [
            "Split the code into small, documented functions",
            "Remove duplicated blocks",
            "Flatten deeply nested logic",
        ],
    ),
}

RELIABILITY_TEXT: Dict[Grade, Tuple[str, List[str]]] = {
    Grade.A: ("Reliable", []),
    Grade.B: ("Mostly reliable", ["Review edge cases such as empty inputs and missing values"]),
    Grade.C: (
        "Unreliable",
        ["Validate inputs before use", "Handle errors from external operations"],
    ),
    Grade.D: (
        "Highly unreliable",
        [
            "Guard every division, index and dereference",
            "Add error handling around risky operations",
        ],
    ),
}


def grade_for_score(score: float, a_min: float, b_min: float, c_min: float) -> Grade:
    """Higher-is-better mapping: A at or above ``a_min`` down to D below ``c_min``."""
    if score >= a_min:
        return Grade.A
    if score >= b_min:
        return Grade.B
    if score >= c_min:
        return Grade.C
    return Grade.D


def invalid_score_rating(family: str, value) -> Rating:
    logger.warning(f"Invalid {family} score {value!r}; grading D")
    description = {
        "complexity": COMPLEXITY_TEXT,
        "maintainability": MAINTAINABILITY_TEXT,
        "reliability": RELIABILITY_TEXT,
    }.get(family, RELIABILITY_TEXT)[Grade.D][0]
    return Rating(
        grade=Grade.D,
        score=0.0,
        description=description,
        reason=f"The {family} score could not be computed",
        issues=[f"Invalid {family} score provided"],
    )


def improvement_suggestions(categories: Iterable[IssueCategory]) -> List[str]:
    return [IMPROVEMENTS[category] for category in categories if category in IMPROVEMENTS]


def adjusted_complexity(
    raw: int, max_depth: int, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS
) -> float:
    """Raw complexity inflated when nesting is deep relative to branching."""
    if max_depth >= thresholds.nesting_severe_depth:
        return raw * thresholds.nesting_severe_factor
    if max_depth >= thresholds.nesting_penalty_depth and max_depth * 2 > raw:
        return raw * thresholds.nesting_penalty_factor
    return float(raw)


def complexity_score(value: float) -> float:
    """Piecewise-linear 0-100 score aligned with the 10/20/30 grade bands."""
    if value <= 10:
        score = 100.0 - (value - 1) * 10.0 / 9.0
    elif value <= 20:
        score = 90.0 - (value - 10)
    elif value <= 30:
        score = 80.0 - (value - 20)
    else:
        score = 70.0 - (value - 30)
    return clamp_score(score)


def grade_complexity(
    raw: int,
    max_depth: int = 0,
    hotspots: Sequence[str] = (),
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> Rating:
    """
    Rate cyclomatic complexity, lower being better.

    The grade uses the nesting-adjusted value; ``hotspots`` lists the
    functions worth mentioning in the rating's issues.
    """
    if not is_finite_number(raw):
        return invalid_score_rating("complexity", raw)

    adjusted = adjusted_complexity(raw, max_depth, thresholds)
    if adjusted <= thresholds.complexity_a_max:
        grade = Grade.A
    elif adjusted <= thresholds.complexity_b_max:
        grade = Grade.B
    elif adjusted <= thresholds.complexity_c_max:
        grade = Grade.C
    else:
        grade = Grade.D

    reason = f"Cyclomatic complexity is {raw}"
    if adjusted != raw:
        reason += f", adjusted to {adjusted:.1f} for nesting depth {max_depth}"

    description, improvements = COMPLEXITY_TEXT[grade]
    return Rating(
        grade=grade,
        score=complexity_score(adjusted),
        description=description,
        reason=reason,
        issues=list(hotspots)[:MAX_RATING_ISSUES],
        improvements=list(improvements),
    )


def grade_reliability(
    aggregation: AggregationResult,
    confirmed: Sequence[Issue] = (),
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> Rating:
    """
    Rate runtime and exception-handling issues.

    Any confirmed critical issue forces grade D regardless of the score.
    The warning flag marks good grades that still hide several severe issues.
    """
    score = 100.0 - aggregation.deduction
    if not is_finite_number(score):
        return invalid_score_rating("reliability", score)
    score = clamp_score(score)

    grade = grade_for_score(
        score,
        thresholds.reliability_a_min,
        thresholds.reliability_b_min,
        thresholds.reliability_c_min,
    )
    if confirmed:
        grade = Grade.D
        reason = f"{len(confirmed)} confirmed critical issue(s) can fail at runtime"
    elif aggregation.groups:
        reason = f"{aggregation.issue_count} reliability issue(s) reduce the score to {score:.0f}"
    else:
        reason = "No reliability issues detected"

    critical = sum(g.count for g in aggregation.groups if g.is_critical)
    major = sum(
        1 for g in aggregation.groups for issue in g.issues
        if issue.severity.is_major and not issue.severity.is_critical
    )
    warning = (
        grade in (Grade.A, Grade.B) and critical >= thresholds.critical_warning_count
    ) or (grade is Grade.B and major >= thresholds.major_warning_count)

    description, canned = RELIABILITY_TEXT[grade]
    improvements = improvement_suggestions(aggregation.categories()) or list(canned)
    return Rating(
        grade=grade,
        score=score,
        description=description,
        reason=reason,
        issues=[g.summary for g in aggregation.groups[:MAX_RATING_ISSUES]],
        improvements=improvements,
        warning_flag=warning,
    )
