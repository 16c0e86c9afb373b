"""
Caching for Quality Insight.

``ReportCache`` persists finished reports with diskcache (SQLite-backed);
``NormalizationCache`` memoizes issue-description normalization in memory.
"""

import hashlib
import json
import threading
from dataclasses import asdict
from typing import Any, Callable, Dict, Optional

from diskcache import Cache

from .config import ThresholdConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class NormalizationCache:
    """
    Thread-safe memo of description -> normalized description.

    Writes are idempotent (the same input always normalizes to the same
    output), so concurrent analyses may share one instance.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, key: str, compute: Callable[[str], str]) -> str:
        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached
        value = compute(key)
        with self._lock:
            self._entries.setdefault(key, value)
        return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class ReportCache:
    """
    SQLite-based cache for finished analysis reports.

    Keys hash the language, the scoring configuration and the source text,
    so any change to one of them misses. Cache failures are logged and
    treated as misses; analysis never fails because of the cache.
    """

    def __init__(
        self,
        cache_dir: str = ".quality-insight-cache",
        ttl_hours: int = 24,
        enabled: bool = True,
    ):
        """
        Initialize cache.

        Args:
            cache_dir: Directory for cache storage
            ttl_hours: Time-to-live in hours
            enabled: Whether caching is enabled
        """
        self.enabled = enabled
        self.ttl_seconds = ttl_hours * 3600

        if self.enabled:
            self.cache = Cache(cache_dir)
            logger.debug(f"Cache initialized at {cache_dir} with TTL={ttl_hours}h")
        else:
            self.cache = None
            logger.debug("Cache disabled")

    @staticmethod
    def make_key(text: str, language: str, config_hash: str) -> str:
        key_data = f"{language}\0{config_hash}\0{text}"
        return hashlib.sha256(key_data.encode("utf-8", errors="replace")).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled or self.cache is None:
            return None

        try:
            value = self.cache.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {key[:16]}...")
            return value
        except Exception as e:
            logger.warning(f"Cache get failed: {e}")
            return None

    def set(self, key: str, value: Any) -> None:
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.set(key, value, expire=self.ttl_seconds)
            logger.debug(f"Cache set: {key[:16]}...")
        except Exception as e:
            logger.warning(f"Cache set failed: {e}")

    def clear(self) -> None:
        """Clear all cache entries."""
        if not self.enabled or self.cache is None:
            return

        try:
            self.cache.clear()
            logger.info("Cache cleared")
        except Exception as e:
            logger.warning(f"Cache clear failed: {e}")

    def stats(self) -> dict:
        if not self.enabled or self.cache is None:
            return {"enabled": False}

        try:
            return {
                "enabled": True,
                "size": len(self.cache),
                "directory": self.cache.directory,
                "volume": self.cache.volume(),
            }
        except Exception as e:
            logger.warning(f"Cache stats failed: {e}")
            return {"enabled": True, "error": str(e)}

    def close(self) -> None:
        """Close cache (cleanup)."""
        if self.cache is not None:
            self.cache.close()


def compute_config_hash(config: dict) -> str:
    """
    Compute hash of configuration for cache invalidation.

    Args:
        config: Configuration dictionary

    Returns:
        SHA256 hash of configuration
    """
    config_str = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(config_str.encode()).hexdigest()[:16]


def thresholds_hash(thresholds: ThresholdConfig) -> str:
    return compute_config_hash(asdict(thresholds))
