"""Bounded arithmetic: clamping, ratios and logarithmic compression."""

from typing import Any

import numpy as np


def is_finite_number(value: Any) -> bool:
    """True for real numbers that are neither NaN nor infinite."""
    if isinstance(value, bool):
        return False
    try:
        return bool(np.isfinite(float(value)))
    except (TypeError, ValueError):
        return False


def finite_or(value: Any, default: float = 0.0) -> float:
    """Return ``value`` as float, or ``default`` if it is not finite."""
    if is_finite_number(value):
        return float(value)
    return default


def clamp_score(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp to ``[low, high]``; non-finite input clamps to ``low``."""
    return float(np.clip(finite_or(value, low), low, high))


def safe_percent(part: float, whole: float) -> float:
    """``part / whole * 100`` bounded to [0, 100]; 0 when ``whole`` is 0."""
    if not whole or not is_finite_number(whole):
        return 0.0
    return clamp_score(finite_or(part) / float(whole) * 100.0)


def compress_deduction(total: float, knee: float = 20.0, scale: float = 5.0) -> float:
    """
    Logarithmic compression of a deduction total.

    Up to ``knee`` the total is kept as is; beyond it growth becomes
    ``knee + log2(total - knee + 1) * scale``, so many issues cannot push a
    score arbitrarily far below zero.

    Args:
        total: Sum of group deductions
        knee: Point where compression starts
        scale: Points per doubling beyond the knee

    Returns:
        Compressed deduction (never negative)
    """
    total = max(0.0, finite_or(total))
    if total <= knee:
        return total
    return float(knee + np.log2(total - knee + 1.0) * scale)
