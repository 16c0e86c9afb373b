"""Numeric guards shared by the scoring stages."""

from .bounds import clamp_score, compress_deduction, finite_or, is_finite_number, safe_percent

__all__ = [
    "clamp_score",
    "compress_deduction",
    "finite_or",
    "is_finite_number",
    "safe_percent",
]
