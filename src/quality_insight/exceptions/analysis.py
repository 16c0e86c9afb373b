"""Analysis-related exceptions: language lookup and collaborator failures."""

from typing import List

from .base import QualityInsightError


class AnalysisError(QualityInsightError):
    """Base class for analysis-related errors."""
    pass


class UnsupportedLanguageError(AnalysisError):
    """Raised by strict profile lookup when a language tag is unknown."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages


class CollaboratorError(QualityInsightError):
    """Raised when an LLM-backed collaborator call fails or returns garbage."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Collaborator call {operation} failed",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason
