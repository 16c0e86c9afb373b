"""Issue aggregation: group similar issues and turn them into a score deduction.

Issues are grouped by category, normalized description and criticality, so
one problem repeated twenty times is penalized as a pattern, not twenty
times over. Each group's deduction is

    weight(max severity) x (1 + log2(n)) x context factor x path factor

and the family total is compressed logarithmically above a knee.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..cache import NormalizationCache
from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..math import compress_deduction
from ..models import Issue, IssueCategory, Severity

logger = get_logger(__name__)

_QUOTED = re.compile(r"'[^']*'|\"[^\"]*\"|`[^`]*`")
_LINE_REFERENCE = re.compile(r"\b(?:line|at|on)\s+\d+\b")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_WHITESPACE = re.compile(r"\s+")

_SEVERITY_ORDER = {
    Severity.MINOR: 0,
    Severity.MAJOR: 1,
    Severity.CRITICAL: 2,
    Severity.BLOCKER: 3,
}

CATEGORY_BUCKETS = (
    "Bugs - Critical",
    "Bugs - Runtime",
    "Bugs - Exception Handling",
    "Code Smells - Structure",
    "Code Smells - Maintainability",
    "Code Smells - Naming",
)


@dataclass(frozen=True)
class IssueGroup:
    category: IssueCategory
    normalized: str
    is_critical: bool
    issues: Tuple[Issue, ...]
    severity: Severity
    deduction: float

    @property
    def count(self) -> int:
        return len(self.issues)

    @property
    def summary(self) -> str:
        """Representative description, with a repeat count when grouped."""
        description = self.issues[0].description
        return f"{description} (x{self.count})" if self.count > 1 else description


@dataclass(frozen=True)
class AggregationResult:
    groups: Tuple[IssueGroup, ...] = ()
    raw_deduction: float = 0.0
    deduction: float = 0.0

    @property
    def issue_count(self) -> int:
        return sum(group.count for group in self.groups)

    def categories(self) -> List[IssueCategory]:
        """Categories present, most costly first."""
        seen: List[IssueCategory] = []
        for group in self.groups:
            if group.category not in seen:
                seen.append(group.category)
        return seen


def normalize_description(text: str) -> str:
    """Lowercase, mask identifiers and numbers, drop line references."""
    text = _QUOTED.sub("*", text.lower())
    text = _LINE_REFERENCE.sub("", text)
    text = _NUMBER.sub("#", text)
    return _WHITESPACE.sub(" ", text).strip()


def severity_weight(severity: Severity, thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> float:
    return {
        Severity.MINOR: thresholds.weight_minor,
        Severity.MAJOR: thresholds.weight_major,
        Severity.CRITICAL: thresholds.weight_critical,
        Severity.BLOCKER: thresholds.weight_blocker,
    }[severity]


def context_factor(issues: Sequence[Issue], thresholds: ThresholdConfig = DEFAULT_THRESHOLDS) -> float:
    """Mean per-issue discount for test, try-guarded and utility code; repeats discount further."""
    if not issues:
        return 1.0
    tag_factors = {
        "test": thresholds.test_code_factor,
        "try": thresholds.error_handling_factor,
        "util": thresholds.utility_code_factor,
    }
    factors = [
        min([1.0] + [tag_factors[tag] for tag in issue.context if tag in tag_factors])
        for issue in issues
    ]
    factor = float(np.mean(factors))
    if len(issues) > 1:
        factor *= thresholds.repeated_issue_factor
    return factor


def path_factor(
    issues: Sequence[Issue],
    critical: bool,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> float:
    """Issues on conditional paths weigh less; critical groups never drop below the floor."""
    if not issues:
        return 1.0
    factor = float(np.mean([
        thresholds.conditional_path_factor if "conditional" in issue.context else 1.0
        for issue in issues
    ]))
    if critical:
        factor = max(factor, thresholds.critical_path_floor)
    return factor


def group_deduction(
    issues: Sequence[Issue],
    critical: bool,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> Tuple[Severity, float]:
    severity = max((issue.severity for issue in issues), key=_SEVERITY_ORDER.__getitem__)
    count_factor = 1.0 + math.log2(len(issues))
    deduction = (
        severity_weight(severity, thresholds)
        * count_factor
        * context_factor(issues, thresholds)
        * path_factor(issues, critical, thresholds)
    )
    return severity, deduction


def aggregate(
    issues: Iterable[Issue],
    family: Sequence[IssueCategory],
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    cache: Optional[NormalizationCache] = None,
) -> AggregationResult:
    """
    Group the issues of one family and compute the family's deduction.

    Args:
        issues: All issues of the unit; those outside ``family`` are ignored
        family: Categories scored together (reliability or maintainability)
        thresholds: Weights and factors
        cache: Normalization memo; a private one is used when omitted

    Returns:
        Groups sorted by deduction, plus raw and compressed totals
    """
    cache = cache if cache is not None else NormalizationCache()
    buckets: Dict[Tuple[IssueCategory, str, bool], List[Issue]] = {}
    for issue in issues:
        if issue.category not in family:
            continue
        normalized = cache.get_or_compute(issue.description, normalize_description)
        key = (issue.category, normalized, issue.severity.is_critical)
        buckets.setdefault(key, []).append(issue)

    groups: List[IssueGroup] = []
    for (category, normalized, critical), members in buckets.items():
        severity, deduction = group_deduction(members, critical, thresholds)
        groups.append(IssueGroup(
            category=category,
            normalized=normalized,
            is_critical=critical,
            issues=tuple(members),
            severity=severity,
            deduction=deduction,
        ))
    groups.sort(key=lambda g: (-g.deduction, g.issues[0].line or 0))

    raw = float(sum(group.deduction for group in groups))
    compressed = compress_deduction(
        raw, knee=thresholds.compression_knee, scale=thresholds.compression_scale
    )
    if groups:
        logger.debug(
            f"aggregate: {sum(g.count for g in groups)} issues in {len(groups)} groups, "
            f"deduction {raw:.1f} -> {compressed:.1f}"
        )
    return AggregationResult(groups=tuple(groups), raw_deduction=raw, deduction=compressed)


def _bucket_for(issue: Issue) -> str:
    if issue.category is IssueCategory.RUNTIME:
        return "Bugs - Critical" if issue.severity.is_critical else "Bugs - Runtime"
    if issue.category is IssueCategory.EXCEPTION:
        return "Bugs - Exception Handling"
    if issue.category is IssueCategory.STRUCTURE:
        return "Code Smells - Structure"
    if issue.category is IssueCategory.READABILITY:
        return "Code Smells - Maintainability"
    return "Code Smells - Naming"


def categorize_issues(issues: Iterable[Issue]) -> Dict[str, List[str]]:
    """Named buckets of issue descriptions; empty buckets are left out."""
    buckets: Dict[str, List[str]] = {name: [] for name in CATEGORY_BUCKETS}
    for issue in issues:
        entry = f"Line {issue.line}: {issue.description}" if issue.line else issue.description
        buckets[_bucket_for(issue)].append(entry)
    return {name: entries for name, entries in buckets.items() if entries}
