"""Public API for Quality Insight.

Example:
    >>> from quality_insight import analyze
    >>> report = analyze("result = total / count")
    >>> report.reliability.grade.value
    'D'
"""

from typing import Optional, Union

from .cache import NormalizationCache, ReportCache, thresholds_hash
from .config import AnalysisConfig
from .engine import AnalysisEngine
from .logging_config import get_logger
from .models import AnalysisReport, SourceUnit
from .scanning import resolve_profile

logger = get_logger(__name__)


def analyze(
    code: Union[str, bytes, None],
    language: str = "generic",
    config: Optional[AnalysisConfig] = None,
    cache: Optional[ReportCache] = None,
    normalization_cache: Optional[NormalizationCache] = None,
) -> AnalysisReport:
    """Analyze a single source text and return its quality report.

    Never fails because of the content of ``code``: empty input, unknown
    languages and detector failures all still produce a complete report.

    Args:
        code: Source text (bytes are decoded as UTF-8 with replacement)
        language: Language tag or alias; unknown tags use the generic profile
        config: Engine configuration (defaults when omitted)
        cache: Report cache; created from ``config`` when caching is enabled
        normalization_cache: Shared description-normalization memo

    Returns:
        AnalysisReport with ratings, metrics, violations, debt and issues
    """
    config = config or AnalysisConfig()
    if isinstance(code, bytes):
        code = code.decode("utf-8", errors="replace")
    text = code or ""

    owned_cache = cache is None and config.cache_enabled
    if owned_cache:
        cache = ReportCache(config.cache_dir, config.cache_ttl_hours)

    try:
        return _analyze_cached(text, language, config, cache, normalization_cache)
    finally:
        if owned_cache:
            cache.close()


def _analyze_cached(
    text: str,
    language: str,
    config: AnalysisConfig,
    cache: Optional[ReportCache],
    normalization_cache: Optional[NormalizationCache],
) -> AnalysisReport:
    profile = resolve_profile(language)
    key = None
    if cache is not None:
        key = ReportCache.make_key(text, profile.name, thresholds_hash(config.thresholds))
        cached = cache.get(key)
        if isinstance(cached, AnalysisReport):
            logger.debug("report served from cache")
            return cached

    engine = AnalysisEngine(config, normalization_cache)
    report = engine.analyze(SourceUnit(text=text, language_tag=profile.name))
    logger.debug(
        f"analysis done: complexity {report.complexity.grade.value}, "
        f"maintainability {report.maintainability.grade.value}, "
        f"reliability {report.reliability.grade.value}"
    )

    if cache is not None and key is not None:
        cache.set(key, report)
    return report
