"""Exception hierarchy for Quality Insight."""

from .analysis import (
    AnalysisError,
    CollaboratorError,
    UnsupportedLanguageError,
)
from .base import QualityInsightError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
)

__all__ = [
    "QualityInsightError",
    "AnalysisError",
    "UnsupportedLanguageError",
    "CollaboratorError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
]
