"""Configuration loading and management for Quality Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig / ThresholdConfig)
    2. Global config (~/.quality-insight.toml)
    3. Project config (./quality-insight.toml)
    4. Explicit config file
    5. Environment variables (QUALITY_INSIGHT_* prefix)
    6. Overrides (passed as kwargs, typically from CLI flags)

Example:
    >>> config = load_config(parallel_detectors=True)
    >>> config.parallel_detectors
    True
    >>> config.thresholds.complexity_a_max
    10
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "QUALITY_INSIGHT_"
CONFIG_FILE_NAME = "quality-insight.toml"


@dataclass(frozen=True)
class ThresholdConfig:
    """Grade tables, aggregation weights and detector parameters.

    There is exactly one canonical set of numbers; every scoring stage reads
    from this object instead of carrying its own constants.

    Attributes:
        Grade tables:
            complexity_*_max: highest raw cyclomatic complexity for A/B/C
            maintainability_*_min: lowest maintainability score for A/B/C
            reliability_*_min: lowest reliability score for A/B/C
            debt_*_max: highest debt ratio (percent) for A/B/C

        Aggregation:
            weight_*: deduction points per severity tier
            test_code_factor, error_handling_factor, utility_code_factor,
            repeated_issue_factor: context discounts
            conditional_path_factor: discount for issues on conditional paths
            critical_path_floor: lowest path factor a critical issue can get
            compression_knee, compression_scale: log compression of totals

        Detectors:
            duplication_window, duplication_min_chars: duplicate block size
            documentation_lookback: comment lines searched above declarations
            documentation_neutral: coverage reported when nothing is declared
            nesting_warn_depth, nesting_major_depth: deep-nesting issue tiers
            nesting_penalty_*: complexity multiplier for disproportionate nesting
            long_function_*, max_parameters, function_complexity_*: smells

        Debt:
            development_minutes_per_line: baseline effort per line of code
    """

    # === Complexity (raw cyclomatic, lower is better) ===
    complexity_a_max: int = 10
    complexity_b_max: int = 20
    complexity_c_max: int = 30

    # === Maintainability (score, higher is better) ===
    maintainability_a_min: float = 90.0
    maintainability_b_min: float = 80.0
    maintainability_c_min: float = 70.0

    # === Reliability (score, higher is better) ===
    reliability_a_min: float = 90.0
    reliability_b_min: float = 75.0
    reliability_c_min: float = 60.0

    # === Technical debt ratio (percent, lower is better) ===
    debt_a_max: float = 5.0
    debt_b_max: float = 10.0
    debt_c_max: float = 20.0

    # === Severity weights (deduction points) ===
    weight_minor: float = 2.0
    weight_major: float = 8.0
    weight_critical: float = 15.0
    weight_blocker: float = 25.0

    # === Context and path factors ===
    test_code_factor: float = 0.5
    error_handling_factor: float = 0.7
    utility_code_factor: float = 0.8
    repeated_issue_factor: float = 0.9
    conditional_path_factor: float = 0.6
    critical_path_floor: float = 0.7

    # === Deduction compression ===
    compression_knee: float = 20.0
    compression_scale: float = 5.0

    # === Warning flag ===
    critical_warning_count: int = 2
    major_warning_count: int = 3

    # === Duplication ===
    duplication_window: int = 6
    duplication_min_chars: int = 50

    # === Documentation ===
    documentation_lookback: int = 3
    documentation_neutral: float = 50.0

    # === Nesting ===
    nesting_warn_depth: int = 3
    nesting_major_depth: int = 5
    nesting_penalty_depth: int = 4
    nesting_penalty_factor: float = 1.15
    nesting_severe_depth: int = 6
    nesting_severe_factor: float = 1.3

    # === Function smells ===
    long_function_minor: int = 30
    long_function_major: int = 60
    max_parameters: int = 5
    function_complexity_minor: int = 15
    function_complexity_major: int = 20

    # === Debt baseline ===
    development_minutes_per_line: int = 30

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if not self.complexity_a_max < self.complexity_b_max < self.complexity_c_max:
            raise ValueError("complexity limits must be strictly increasing (A < B < C)")
        if self.complexity_a_max < 1:
            raise ValueError("complexity_a_max must be at least 1")

        for family in ("maintainability", "reliability"):
            a = getattr(self, f"{family}_a_min")
            b = getattr(self, f"{family}_b_min")
            c = getattr(self, f"{family}_c_min")
            if not 100.0 >= a > b > c >= 0.0:
                raise ValueError(
                    f"{family} cutoffs must be strictly decreasing within [0, 100]"
                )

        if not 0.0 <= self.debt_a_max < self.debt_b_max < self.debt_c_max:
            raise ValueError("debt limits must be strictly increasing (A < B < C)")

        weights = (self.weight_minor, self.weight_major, self.weight_critical, self.weight_blocker)
        if any(w <= 0 for w in weights):
            raise ValueError("severity weights must be positive")
        if list(weights) != sorted(weights):
            raise ValueError("severity weights must not decrease with severity")

        factor_fields = [
            "test_code_factor",
            "error_handling_factor",
            "utility_code_factor",
            "repeated_issue_factor",
            "conditional_path_factor",
            "critical_path_floor",
        ]
        for field_name in factor_fields:
            value = getattr(self, field_name)
            if not 0.0 < value <= 1.0:
                raise ValueError(f"{field_name} must be in (0.0, 1.0]")

        if self.compression_knee <= 0 or self.compression_scale <= 0:
            raise ValueError("compression_knee and compression_scale must be positive")

        if self.duplication_window < 2:
            raise ValueError("duplication_window must be at least 2")
        if self.duplication_min_chars < 0:
            raise ValueError("duplication_min_chars must be non-negative")

        if self.documentation_lookback < 1:
            raise ValueError("documentation_lookback must be at least 1")
        if not 0.0 <= self.documentation_neutral <= 100.0:
            raise ValueError("documentation_neutral must be between 0 and 100")

        if not 0 < self.nesting_warn_depth < self.nesting_major_depth:
            raise ValueError("nesting_warn_depth must be positive and below nesting_major_depth")
        if not self.nesting_penalty_depth <= self.nesting_severe_depth:
            raise ValueError("nesting_penalty_depth must not exceed nesting_severe_depth")
        if not 1.0 <= self.nesting_penalty_factor <= self.nesting_severe_factor:
            raise ValueError("nesting penalty factors must satisfy 1.0 <= penalty <= severe")

        if not 0 < self.long_function_minor < self.long_function_major:
            raise ValueError("long_function_minor must be positive and below long_function_major")
        if not 0 < self.function_complexity_minor < self.function_complexity_major:
            raise ValueError(
                "function_complexity_minor must be positive and below function_complexity_major"
            )
        if self.max_parameters < 1:
            raise ValueError("max_parameters must be at least 1")

        if self.development_minutes_per_line < 1:
            raise ValueError("development_minutes_per_line must be at least 1")


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one engine instance.

    Attributes:
        thresholds: Canonical grade tables and weights
        parallel_detectors: Run the independent detectors in a thread pool
        workers: Thread pool size (None = one per detector)
        cache_enabled: Reuse reports for identical input via diskcache
        cache_dir: Directory for cache storage
        cache_ttl_hours: Cache time-to-live in hours
        verbosity: Logging verbosity level
        llm_model: Chat model used by the feedback collaborators
        llm_base_url: OpenAI-compatible endpoint (None = client default)
        llm_timeout_seconds: Request timeout for collaborator calls
    """

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)

    parallel_detectors: bool = False
    workers: Optional[int] = None

    cache_enabled: bool = False
    cache_dir: str = ".quality-insight-cache"
    cache_ttl_hours: int = 24

    verbosity: Verbosity = "normal"

    llm_model: str = "gpt-4o-mini"
    llm_base_url: Optional[str] = None
    llm_timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.cache_ttl_hours < 0:
            raise ValueError("cache_ttl_hours must be non-negative")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")
        if self.llm_timeout_seconds <= 0:
            raise ValueError("llm_timeout_seconds must be positive")


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigFileError: If a config file is missing or unparsable
        ConfigurationError: If a value is unknown or out of range
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILE_NAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / CONFIG_FILE_NAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    thresholds_dict = merged.pop("thresholds", None)
    if thresholds_dict is not None:
        if isinstance(thresholds_dict, dict):
            try:
                merged["thresholds"] = ThresholdConfig(**thresholds_dict)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid [thresholds] config: {e}")
        elif isinstance(thresholds_dict, ThresholdConfig):
            merged["thresholds"] = thresholds_dict

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from QUALITY_INSIGHT_* environment variables.

    Only scalar AnalysisConfig fields are read, e.g.
    QUALITY_INSIGHT_PARALLEL_DETECTORS=true or QUALITY_INSIGHT_LLM_MODEL=...
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot come from the environment.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))
