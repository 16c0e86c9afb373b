"""Technical debt: remediation minutes against estimated development time."""

from typing import Dict, Iterable

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..models import Grade, Issue, IssueCategory, Severity, TechnicalDebt

logger = get_logger(__name__)

# Minutes to fix one issue, by category and severity.
REMEDIATION_MINUTES: Dict[IssueCategory, Dict[Severity, int]] = {
    IssueCategory.RUNTIME: {
        Severity.MINOR: 5, Severity.MAJOR: 15, Severity.CRITICAL: 30, Severity.BLOCKER: 45,
    },
    IssueCategory.EXCEPTION: {
        Severity.MINOR: 5, Severity.MAJOR: 10, Severity.CRITICAL: 20, Severity.BLOCKER: 30,
    },
    IssueCategory.STRUCTURE: {
        Severity.MINOR: 10, Severity.MAJOR: 20, Severity.CRITICAL: 45, Severity.BLOCKER: 60,
    },
    IssueCategory.READABILITY: {
        Severity.MINOR: 2, Severity.MAJOR: 5, Severity.CRITICAL: 10, Severity.BLOCKER: 15,
    },
    IssueCategory.NAMING: {
        Severity.MINOR: 3, Severity.MAJOR: 8, Severity.CRITICAL: 15, Severity.BLOCKER: 20,
    },
}


def remediation_minutes(category: IssueCategory, severity: Severity) -> int:
    return REMEDIATION_MINUTES[category][severity]


def debt_grade(ratio_percent: float, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> Grade:
    if ratio_percent <= thresholds.debt_a_max:
        return Grade.A
    if ratio_percent <= thresholds.debt_b_max:
        return Grade.B
    if ratio_percent <= thresholds.debt_c_max:
        return Grade.C
    return Grade.D


def estimate_debt(
    issues: Iterable[Issue],
    lines_of_code: int,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> TechnicalDebt:
    """
    Sum remediation time and relate it to the time the code took to write.

    Development time is ``lines_of_code * development_minutes_per_line``.
    With no code the ratio is 0 (grade A) rather than undefined.
    """
    total = sum(issue.remediation_minutes for issue in issues)
    development = max(0, lines_of_code) * thresholds.development_minutes_per_line
    # Not capped at 100: remediation can outweigh the original effort.
    ratio = total / development * 100.0 if development else 0.0

    grade = debt_grade(ratio, thresholds)
    logger.debug(f"debt: {total} min over {development} min development ({ratio:.1f}%)")
    return TechnicalDebt(
        total_minutes=total,
        debt_ratio_percent=ratio,
        grade=grade,
        estimated_development_minutes=development,
    )
