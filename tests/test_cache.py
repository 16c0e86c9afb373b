"""Tests for the report and normalization caches."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from quality_insight.cache import NormalizationCache, ReportCache, compute_config_hash, thresholds_hash
from quality_insight.config import ThresholdConfig


@pytest.fixture
def report_cache(tmp_path):
    cache = ReportCache(cache_dir=str(tmp_path / "cache"), ttl_hours=1)
    yield cache
    cache.close()


class TestReportCache:
    def test_miss_then_hit(self, report_cache):
        key = ReportCache.make_key("x = 1", "python", "abc")
        assert report_cache.get(key) is None
        report_cache.set(key, {"grade": "A"})
        assert report_cache.get(key) == {"grade": "A"}

    def test_stats_and_clear(self, report_cache):
        report_cache.set("k", 1)
        stats = report_cache.stats()
        assert stats["enabled"]
        assert stats["size"] == 1
        report_cache.clear()
        assert report_cache.stats()["size"] == 0

    def test_disabled(self, tmp_path):
        cache = ReportCache(cache_dir=str(tmp_path / "off"), enabled=False)
        cache.set("k", 1)
        assert cache.get("k") is None
        assert cache.stats() == {"enabled": False}
        cache.close()

    def test_key_depends_on_text(self):
        assert ReportCache.make_key("a", "go", "h") != ReportCache.make_key("b", "go", "h")


class TestConfigHash:
    def test_stable(self):
        assert compute_config_hash({"a": 1, "b": 2}) == compute_config_hash({"b": 2, "a": 1})

    def test_thresholds_change_hash(self):
        assert thresholds_hash(ThresholdConfig()) != thresholds_hash(ThresholdConfig(max_parameters=7))


class TestNormalizationCache:
    def test_computes_once(self):
        cache = NormalizationCache()
        calls = []

        def compute(key):
            calls.append(key)
            return key.lower()

        assert cache.get_or_compute("Foo", compute) == "foo"
        assert cache.get_or_compute("Foo", compute) == "foo"
        assert calls == ["Foo"]
        assert len(cache) == 1

    def test_concurrent_writers(self):
        cache = NormalizationCache()
        keys = [f"Key {i % 10}" for i in range(200)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda k: cache.get_or_compute(k, str.lower), keys))
        assert results == [k.lower() for k in keys]
        assert len(cache) == 10

    def test_clear(self):
        cache = NormalizationCache()
        cache.get_or_compute("a", str.upper)
        cache.clear()
        assert len(cache) == 0
