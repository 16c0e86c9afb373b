"""Analysis engine: runs the detector pipeline over one source unit.

Stages:
    1. preprocess + block map
    2. metrics (function and class spans)
    3. complexity, nesting, duplication, documentation (independent;
       optionally run in a thread pool)
    4. risk scan and smells (consume stage 3 results)
    5. aggregation, confirmation, grading, debt, report

A detector that raises is logged and replaced by its empty result, so the
caller always receives a complete report.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .cache import NormalizationCache
from .config import AnalysisConfig
from .detectors import (
    EMPTY_METRICS,
    ComplexityResult,
    DocumentationResult,
    DuplicationResult,
    NestingResult,
    SourceMetrics,
    analyze_documentation,
    count_complexity,
    detect_duplication,
    detect_smells,
    extract_metrics,
    scan_risks,
    track_nesting,
)
from .detectors.complexity import function_key
from .logging_config import get_logger
from .models import (
    MAINTAINABILITY_CATEGORIES,
    RELIABILITY_CATEGORIES,
    AnalysisReport,
    Issue,
    Metrics,
    SourceUnit,
)
from .report import assemble_report
from .scanning import BlockMap, PreprocessedSource, build_block_map, preprocess, resolve_profile
from .scoring import aggregate, confirmed_criticals, estimate_debt, grade_complexity, grade_reliability
from .scoring.grades import adjusted_complexity
from .scoring.maintainability import rate_maintainability

logger = get_logger(__name__)

# Default pool size when running the independent detectors concurrently.
_DEFAULT_WORKERS = min(os.cpu_count() or 4, 4)


@dataclass(frozen=True)
class DetectorSignals:
    """Everything the detectors produced for one unit."""

    source: PreprocessedSource
    block_map: BlockMap
    metrics: SourceMetrics
    complexity: ComplexityResult
    nesting: NestingResult
    duplication: DuplicationResult
    documentation: DocumentationResult
    issues: Tuple[Issue, ...]


class AnalysisEngine:
    """
    Stateless between calls: every analysis gets fresh detector state.

    The only shared object is the optional ``NormalizationCache``, which is
    lock-protected and may be reused across engines and threads.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        normalization_cache: Optional[NormalizationCache] = None,
    ):
        self.config = config or AnalysisConfig()
        self.thresholds = self.config.thresholds
        self.normalization_cache = normalization_cache

    def analyze(self, unit: SourceUnit) -> AnalysisReport:
        profile = resolve_profile(unit.language_tag)
        signals = self.detect(unit.text, profile)
        return self.score(profile.name, signals)

    # ── detection ──────────────────────────────────────────────────

    def detect(self, text: str, profile) -> DetectorSignals:
        source = preprocess(text, profile)
        block_map = build_block_map(source)
        logger.debug(f"preprocessed {len(source)} lines as {profile.name}")

        metrics = self._safe("metrics", EMPTY_METRICS, extract_metrics, source)
        t = self.thresholds

        independent: Dict[str, Tuple[Any, Callable, tuple]] = {
            "complexity": (
                ComplexityResult(), count_complexity, (source, metrics.functions)
            ),
            "nesting": (NestingResult(), track_nesting, (block_map, metrics.functions)),
            "duplication": (
                DuplicationResult(),
                detect_duplication,
                (source, t.duplication_window, t.duplication_min_chars),
            ),
            "documentation": (
                DocumentationResult(coverage_percent=t.documentation_neutral),
                analyze_documentation,
                (
                    source,
                    metrics.functions,
                    metrics.classes,
                    t.documentation_lookback,
                    t.documentation_neutral,
                ),
            ),
        }
        results = self._run_independent(independent)
        complexity = results["complexity"]
        nesting = results["nesting"]
        duplication = results["duplication"]
        documentation = results["documentation"]

        issues: List[Issue] = []
        issues.extend(self._safe(
            "risk", [], scan_risks, source, block_map, metrics.functions, nesting,
            t.nesting_warn_depth, t.nesting_major_depth,
        ))
        issues.extend(self._safe(
            "smells", [], detect_smells, source, metrics.functions, metrics.classes,
            complexity, duplication, documentation, block_map, t,
        ))

        return DetectorSignals(
            source=source,
            block_map=block_map,
            metrics=metrics,
            complexity=complexity,
            nesting=nesting,
            duplication=duplication,
            documentation=documentation,
            issues=tuple(issues),
        )

    def _run_independent(self, detectors: Dict[str, Tuple[Any, Callable, tuple]]) -> Dict[str, Any]:
        if not self.config.parallel_detectors:
            return {
                name: self._safe(name, empty, func, *args)
                for name, (empty, func, args) in detectors.items()
            }

        workers = self.config.workers or _DEFAULT_WORKERS
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                name: executor.submit(self._safe, name, empty, func, *args)
                for name, (empty, func, args) in detectors.items()
            }
            return {name: future.result() for name, future in futures.items()}

    @staticmethod
    def _safe(name: str, empty: Any, func: Callable, *args) -> Any:
        try:
            return func(*args)
        except Exception as e:
            logger.warning(f"Detector '{name}' failed, using empty result: {e}")
            return empty

    # ── scoring ────────────────────────────────────────────────────

    def score(self, language: str, signals: DetectorSignals) -> AnalysisReport:
        t = self.thresholds
        source_metrics = signals.metrics
        issues = signals.issues

        adjusted = adjusted_complexity(
            signals.complexity.total, signals.nesting.max_depth, t
        )
        metrics = Metrics(
            total_lines=source_metrics.total_lines,
            lines_of_code=source_metrics.lines_of_code,
            comment_lines=source_metrics.comment_lines,
            comment_ratio=source_metrics.comment_ratio,
            function_count=source_metrics.function_count,
            class_count=source_metrics.class_count,
            average_function_length=source_metrics.average_function_length,
            max_function_length=source_metrics.max_function_length,
            cyclomatic_complexity_raw=signals.complexity.total,
            adjusted_complexity=adjusted,
            max_nesting_depth=signals.nesting.max_depth,
            duplicated_lines=signals.duplication.duplicated_lines,
            duplication_percent=signals.duplication.duplication_percent,
            documentation_coverage_percent=signals.documentation.coverage_percent,
        )

        reliability_groups = aggregate(
            issues, RELIABILITY_CATEGORIES, t, self.normalization_cache
        )
        maintainability_groups = aggregate(
            issues, MAINTAINABILITY_CATEGORIES, t, self.normalization_cache
        )
        confirmed = confirmed_criticals(issues)
        if confirmed:
            logger.debug(f"{len(confirmed)} confirmed critical issue(s)")

        complexity_rating = grade_complexity(
            signals.complexity.total,
            signals.nesting.max_depth,
            self._hotspots(signals),
            t,
        )
        maintainability_rating = rate_maintainability(metrics, maintainability_groups, t)
        reliability_rating = grade_reliability(reliability_groups, confirmed, t)
        debt = estimate_debt(issues, metrics.lines_of_code, t)

        return assemble_report(
            language=language,
            metrics=metrics,
            complexity=complexity_rating,
            maintainability=maintainability_rating,
            reliability=reliability_rating,
            technical_debt=debt,
            issues=issues,
        )

    def _hotspots(self, signals: DetectorSignals) -> List[str]:
        limit = self.thresholds.function_complexity_minor
        ranked = sorted(
            (
                (signals.complexity.per_function.get(function_key(fn), 1), fn)
                for fn in signals.metrics.functions
            ),
            key=lambda pair: -pair[0],
        )
        return [
            f"Function '{fn.name}' (line {fn.start_line}) has complexity {value}"
            for value, fn in ranked
            if value > limit
        ]
