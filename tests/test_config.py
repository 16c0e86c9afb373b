"""Tests for configuration loading and validation."""

import os

import pytest

from quality_insight.config import AnalysisConfig, ThresholdConfig, load_config
from quality_insight.exceptions import ConfigFileError, ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No global or project config files and no QUALITY_INSIGHT_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("QUALITY_INSIGHT_"):
            monkeypatch.delenv(name)
    return tmp_path


class TestLoadConfig:
    """Merging of defaults, files, environment and overrides."""

    def test_defaults(self):
        assert load_config() == AnalysisConfig()

    def test_overrides(self):
        config = load_config(parallel_detectors=True, workers=2)
        assert config.parallel_detectors
        assert config.workers == 2

    def test_verbosity_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_explicit_file(self, isolated):
        path = isolated / "custom.toml"
        path.write_text(
            "parallel_detectors = true\n"
            "workers = 3\n"
            "\n"
            "[thresholds]\n"
            "complexity_a_max = 5\n"
        )
        config = load_config(config_file=path)
        assert config.parallel_detectors
        assert config.workers == 3
        assert config.thresholds.complexity_a_max == 5
        assert config.thresholds.complexity_b_max == 20

    def test_project_file_discovered(self, isolated):
        (isolated / "quality-insight.toml").write_text("cache_ttl_hours = 2\n")
        assert load_config().cache_ttl_hours == 2

    def test_overrides_beat_files(self, isolated):
        (isolated / "quality-insight.toml").write_text("cache_ttl_hours = 2\n")
        assert load_config(cache_ttl_hours=6).cache_ttl_hours == 6

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("QUALITY_INSIGHT_PARALLEL_DETECTORS", "yes")
        monkeypatch.setenv("QUALITY_INSIGHT_LLM_MODEL", "local-model")
        monkeypatch.setenv("QUALITY_INSIGHT_LLM_BASE_URL", "http://localhost:8080/v1")
        config = load_config()
        assert config.parallel_detectors
        assert config.llm_model == "local-model"
        assert config.llm_base_url == "http://localhost:8080/v1"

    def test_bad_environment_value(self, monkeypatch):
        monkeypatch.setenv("QUALITY_INSIGHT_WORKERS", "many")
        with pytest.raises(InvalidConfigError) as excinfo:
            load_config()
        assert excinfo.value.key == "QUALITY_INSIGHT_WORKERS"


class TestConfigErrors:
    def test_missing_file(self, isolated):
        with pytest.raises(ConfigFileError):
            load_config(config_file=isolated / "absent.toml")

    def test_unparsable_file(self, isolated):
        path = isolated / "broken.toml"
        path.write_text("workers = = 3\n")
        with pytest.raises(ConfigFileError):
            load_config(config_file=path)

    def test_invalid_value(self):
        with pytest.raises(ConfigurationError):
            load_config(workers=0)

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            load_config(no_such_option=True)

    def test_invalid_thresholds(self, isolated):
        path = isolated / "thresholds.toml"
        path.write_text("[thresholds]\ncomplexity_a_max = 50\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)


class TestThresholdConfig:
    """Validation of the canonical threshold tables."""

    def test_defaults_valid(self):
        t = ThresholdConfig()
        assert (t.weight_minor, t.weight_major, t.weight_critical, t.weight_blocker) == (2, 8, 15, 25)

    @pytest.mark.parametrize("fields", [
        {"complexity_b_max": 5},
        {"maintainability_a_min": 70.0},
        {"debt_a_max": 30.0},
        {"weight_minor": 30.0},
        {"test_code_factor": 0.0},
        {"duplication_window": 1},
        {"nesting_warn_depth": 6},
        {"long_function_major": 10},
        {"development_minutes_per_line": 0},
    ])
    def test_rejects_inconsistent_tables(self, fields):
        with pytest.raises(ValueError):
            ThresholdConfig(**fields)
