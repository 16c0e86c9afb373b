"""Tests for technical debt estimation."""

import pytest

from quality_insight.models import Grade, Issue, IssueCategory, Severity
from quality_insight.scoring import estimate_debt, remediation_minutes
from quality_insight.scoring.debt import debt_grade


def _issue(minutes):
    return Issue(IssueCategory.RUNTIME, Severity.MAJOR, "x", remediation_minutes=minutes)


class TestRemediationMinutes:
    def test_table(self):
        assert remediation_minutes(IssueCategory.RUNTIME, Severity.CRITICAL) == 30
        assert remediation_minutes(IssueCategory.READABILITY, Severity.MINOR) == 2

    def test_every_combination_positive(self):
        for category in IssueCategory:
            for severity in Severity:
                assert remediation_minutes(category, severity) > 0


class TestEstimateDebt:
    def test_no_code(self):
        debt = estimate_debt([], 0)
        assert debt.total_minutes == 0
        assert debt.debt_ratio_percent == 0.0
        assert debt.grade is Grade.A
        assert debt.estimated_development_minutes == 0

    def test_ratio(self):
        debt = estimate_debt([_issue(30)], 10)
        assert debt.estimated_development_minutes == 300
        assert debt.debt_ratio_percent == pytest.approx(10.0)
        assert debt.grade is Grade.B

    def test_ratio_not_capped(self):
        debt = estimate_debt([_issue(100)], 1)
        assert debt.debt_ratio_percent == pytest.approx(333.33, rel=1e-3)
        assert debt.grade is Grade.D

    def test_issues_without_code(self):
        debt = estimate_debt([_issue(15)], 0)
        assert debt.total_minutes == 15
        assert debt.debt_ratio_percent == 0.0


class TestDebtGrade:
    @pytest.mark.parametrize("ratio,expected", [
        (0.0, Grade.A),
        (5.0, Grade.A),
        (5.1, Grade.B),
        (10.0, Grade.B),
        (20.0, Grade.C),
        (20.1, Grade.D),
    ])
    def test_cutoffs(self, ratio, expected):
        assert debt_grade(ratio) is expected
