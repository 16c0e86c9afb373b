"""Scoring: aggregation, confirmation, grades and technical debt."""

from .aggregator import AggregationResult, IssueGroup, aggregate, categorize_issues, normalize_description
from .confirmation import confirmed_criticals, is_confirmed_critical
from .debt import estimate_debt, remediation_minutes
from .grades import grade_complexity, grade_for_score, grade_reliability
from .maintainability import rate_maintainability

__all__ = [
    "AggregationResult",
    "IssueGroup",
    "aggregate",
    "categorize_issues",
    "normalize_description",
    "confirmed_criticals",
    "is_confirmed_critical",
    "estimate_debt",
    "remediation_minutes",
    "grade_complexity",
    "grade_for_score",
    "grade_reliability",
    "rate_maintainability",
]
