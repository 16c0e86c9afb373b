"""Tests for bounded arithmetic helpers."""

import math

import pytest

from quality_insight.math import clamp_score, compress_deduction, is_finite_number, safe_percent
from quality_insight.math.bounds import finite_or


class TestFiniteness:
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), None, "abc", True])
    def test_rejects(self, value):
        assert not is_finite_number(value)

    def test_accepts(self):
        assert is_finite_number(3)
        assert is_finite_number(-2.5)

    def test_finite_or(self):
        assert finite_or(float("inf"), 7.0) == 7.0
        assert finite_or(4) == 4.0


class TestClampAndPercent:
    def test_clamp(self):
        assert clamp_score(150) == 100.0
        assert clamp_score(-3) == 0.0
        assert clamp_score(float("nan")) == 0.0

    def test_percent(self):
        assert safe_percent(3, 4) == 75.0
        assert safe_percent(1, 0) == 0.0
        assert safe_percent(10, 5) == 100.0


class TestCompressDeduction:
    def test_below_knee_unchanged(self):
        assert compress_deduction(12.5) == 12.5

    def test_above_knee(self):
        assert compress_deduction(36.0) == pytest.approx(20 + math.log2(17) * 5)

    def test_monotonic(self):
        values = [compress_deduction(x) for x in range(0, 500, 7)]
        assert values == sorted(values)

    def test_invalid_input(self):
        assert compress_deduction(-5) == 0.0
        assert compress_deduction(float("inf")) == 0.0
