"""
Quality Insight - heuristic code quality grades for a single source file

Scans source text in several languages with lexical heuristics and
produces complexity, maintainability and reliability grades, a technical
debt estimate and a line-referenced issue list. No parser, no execution.
"""

__version__ = "0.1.0"
__author__ = "Naman Agarwal"

from .api import analyze
from .cache import NormalizationCache, ReportCache
from .config import AnalysisConfig, ThresholdConfig, load_config
from .engine import AnalysisEngine
from .exceptions import QualityInsightError
from .models import (
    AnalysisReport,
    Grade,
    Issue,
    IssueCategory,
    Metrics,
    Rating,
    Severity,
    SourceUnit,
    TechnicalDebt,
    Violations,
)

__all__ = [
    "analyze",  # Main entry point
    "AnalysisEngine",  # Direct engine access
    "AnalysisConfig",
    "ThresholdConfig",
    "load_config",
    "NormalizationCache",
    "ReportCache",
    "QualityInsightError",
    "AnalysisReport",
    "Grade",
    "Issue",
    "IssueCategory",
    "Metrics",
    "Rating",
    "Severity",
    "SourceUnit",
    "TechnicalDebt",
    "Violations",
]
