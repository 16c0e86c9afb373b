"""Maintainability score: metric penalties plus structure, readability and naming issues."""

from dataclasses import dataclass
from typing import List, Tuple

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..math import clamp_score, is_finite_number
from ..models import Metrics, Rating
from .aggregator import AggregationResult
from .grades import (
    MAINTAINABILITY_TEXT,
    MAX_RATING_ISSUES,
    grade_for_score,
    improvement_suggestions,
    invalid_score_rating,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Penalty:
    reason: str
    points: float


def _tier(value: float, tiers: Tuple[Tuple[float, float], ...]) -> float:
    """Points of the first ``(limit, points)`` tier that ``value`` exceeds."""
    for limit, points in tiers:
        if value > limit:
            return points
    return 0.0


def metric_penalties(metrics: Metrics) -> List[Penalty]:
    """Deductions derived from raw metrics, largest first."""
    penalties: List[Penalty] = []

    longest = metrics.max_function_length
    points = _tier(longest, ((100, 20.0), (60, 12.0), (30, 6.0)))
    if points:
        penalties.append(Penalty(f"longest function has {longest} lines", points))

    depth = metrics.max_nesting_depth
    points = _tier(depth, ((5, 15.0), (4, 10.0), (3, 5.0)))
    if points:
        penalties.append(Penalty(f"nesting reaches depth {depth}", points))

    duplication = metrics.duplication_percent
    points = _tier(duplication, ((20, 15.0), (10, 10.0), (5, 5.0)))
    if points:
        penalties.append(Penalty(f"{duplication:.0f}% of lines are duplicated", points))

    if metrics.function_count + metrics.class_count > 0:
        coverage = metrics.documentation_coverage_percent
        points = _tier(-coverage, ((-25, 8.0), (-50, 5.0), (-75, 2.0)))
        if points:
            penalties.append(Penalty(f"only {coverage:.0f}% of declarations are documented", points))

    if metrics.lines_of_code > 20 and metrics.comment_ratio < 0.05:
        penalties.append(Penalty("almost no comments", 3.0))

    points = _tier(metrics.lines_of_code, ((500, 8.0), (200, 4.0)))
    if points:
        penalties.append(Penalty(f"file has {metrics.lines_of_code} lines of code", points))

    penalties.sort(key=lambda p: -p.points)
    return penalties


def rate_maintainability(
    metrics: Metrics,
    aggregation: AggregationResult,
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
) -> Rating:
    """
    Score = 100 - metric penalties - compressed maintainability-family deduction.

    Args:
        metrics: Raw metrics of the unit
        aggregation: Aggregated structure, readability and naming issues
        thresholds: Grade cutoffs

    Returns:
        Maintainability rating
    """
    penalties = metric_penalties(metrics)
    score = 100.0 - sum(p.points for p in penalties) - aggregation.deduction
    if not is_finite_number(score):
        return invalid_score_rating("maintainability", score)
    score = clamp_score(score)

    grade = grade_for_score(
        score,
        thresholds.maintainability_a_min,
        thresholds.maintainability_b_min,
        thresholds.maintainability_c_min,
    )

    reasons = [p.reason for p in penalties[:3]]
    if aggregation.groups:
        reasons.append(f"{aggregation.issue_count} maintainability issue(s)")
    reason = "Score reduced by: " + "; ".join(reasons) if reasons else "Code is well structured"

    description, canned = MAINTAINABILITY_TEXT[grade]
    logger.debug(f"maintainability: score {score:.1f}, {len(penalties)} metric penalties")
    return Rating(
        grade=grade,
        score=score,
        description=description,
        reason=reason,
        issues=[g.summary for g in aggregation.groups[:MAX_RATING_ISSUES]],
        improvements=improvement_suggestions(aggregation.categories()) or list(canned),
        warning_flag=False,
    )
