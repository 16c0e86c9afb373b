"""Detectors: each turns preprocessed source into metrics or issues."""

from .complexity import ComplexityResult, count_complexity
from .documentation import DocumentationResult, analyze_documentation
from .duplication import DuplicationResult, detect_duplication
from .metrics import EMPTY_METRICS, SourceMetrics, extract_metrics
from .nesting import NestingResult, track_nesting
from .risk import scan_risks
from .smells import detect_smells

__all__ = [
    "ComplexityResult",
    "count_complexity",
    "DocumentationResult",
    "analyze_documentation",
    "DuplicationResult",
    "detect_duplication",
    "EMPTY_METRICS",
    "SourceMetrics",
    "extract_metrics",
    "NestingResult",
    "track_nesting",
    "scan_risks",
    "detect_smells",
]
