"""Report assembly: pure composition of detector and scoring outputs."""

from typing import Iterable, List, Sequence, Tuple

from .models import (
    AnalysisReport,
    Issue,
    LineReference,
    Metrics,
    Rating,
    TechnicalDebt,
    Violations,
)
from .scoring.aggregator import categorize_issues


def order_issues(issues: Iterable[Issue]) -> Tuple[Issue, ...]:
    """Issues by line (unlined last), then rule, keeping detector order otherwise."""
    return tuple(sorted(issues, key=lambda i: (i.line is None, i.line or 0, i.rule)))


def build_violations(issues: Sequence[Issue]) -> Violations:
    major = sum(1 for issue in issues if issue.severity.is_major)
    details: List[str] = []
    references: List[LineReference] = []
    for issue in issues:
        prefix = f"Line {issue.line}: " if issue.line else ""
        details.append(f"{prefix}[{issue.severity.value}] {issue.description}")
        if issue.line:
            references.append(LineReference(issue.line, issue.description, issue.severity))
    return Violations(
        major=major,
        minor=len(issues) - major,
        details=details,
        line_references=references,
    )


def assemble_report(
    language: str,
    metrics: Metrics,
    complexity: Rating,
    maintainability: Rating,
    reliability: Rating,
    technical_debt: TechnicalDebt,
    issues: Iterable[Issue],
) -> AnalysisReport:
    """Combine ratings, metrics and issues into the final report."""
    ordered = order_issues(issues)
    return AnalysisReport(
        language=language,
        complexity=complexity,
        maintainability=maintainability,
        reliability=reliability,
        metrics=metrics,
        violations=build_violations(ordered),
        technical_debt=technical_debt,
        issues=ordered,
        issue_categories=categorize_issues(ordered),
    )
