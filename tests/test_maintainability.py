"""Tests for the maintainability rating."""

import pytest

from quality_insight.models import Grade, Metrics
from quality_insight.scoring import rate_maintainability
from quality_insight.scoring.aggregator import AggregationResult
from quality_insight.scoring.maintainability import metric_penalties


def _points(**fields):
    return sum(p.points for p in metric_penalties(Metrics(**fields)))


class TestMetricPenalties:
    """Tiered deductions from raw metrics."""

    def test_clean_metrics(self):
        assert metric_penalties(Metrics()) == []

    @pytest.mark.parametrize("length,points", [(30, 0), (31, 6), (61, 12), (101, 20)])
    def test_function_length(self, length, points):
        assert _points(max_function_length=length) == points

    @pytest.mark.parametrize("depth,points", [(3, 0), (4, 5), (5, 10), (6, 15)])
    def test_nesting(self, depth, points):
        assert _points(max_nesting_depth=depth) == points

    @pytest.mark.parametrize("percent,points", [(5.0, 0), (6.0, 5), (15.0, 10), (50.0, 15)])
    def test_duplication(self, percent, points):
        assert _points(duplication_percent=percent) == points

    @pytest.mark.parametrize("coverage,points", [(75.0, 0), (60.0, 2), (30.0, 5), (10.0, 8)])
    def test_documentation(self, coverage, points):
        assert _points(function_count=1, documentation_coverage_percent=coverage) == points

    def test_documentation_needs_declarations(self):
        assert _points(documentation_coverage_percent=0.0) == 0

    def test_comment_and_size(self):
        assert _points(lines_of_code=21, comment_ratio=0.0) == 3
        assert _points(lines_of_code=21, comment_ratio=0.1) == 0
        assert _points(lines_of_code=600, comment_ratio=0.1) == 8

    def test_largest_first(self):
        penalties = metric_penalties(Metrics(max_function_length=31, max_nesting_depth=6))
        assert [p.points for p in penalties] == [15.0, 6.0]


class TestRateMaintainability:
    def test_clean(self):
        rating = rate_maintainability(Metrics(), AggregationResult())
        assert rating.grade is Grade.A
        assert rating.score == 100.0
        assert rating.reason == "Code is well structured"

    def test_heavy_penalties(self):
        metrics = Metrics(
            lines_of_code=300,
            comment_ratio=0.0,
            function_count=1,
            max_function_length=300,
            max_nesting_depth=6,
            documentation_coverage_percent=0.0,
        )
        rating = rate_maintainability(metrics, AggregationResult())
        assert rating.score == pytest.approx(50.0)
        assert rating.grade is Grade.D
        assert rating.reason.startswith("Score reduced by: longest function has 300 lines")

    def test_issue_deduction(self):
        rating = rate_maintainability(Metrics(), AggregationResult(raw_deduction=15.0, deduction=15.0))
        assert rating.score == pytest.approx(85.0)
        assert rating.grade is Grade.B
        assert not rating.warning_flag

    def test_score_floor(self):
        rating = rate_maintainability(Metrics(), AggregationResult(deduction=250.0))
        assert rating.score == 0.0
        assert rating.grade is Grade.D
