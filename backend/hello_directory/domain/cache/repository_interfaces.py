"""
Cache Repository Interfaces

Abstract contract shared by every cache store backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ...monitoring.cache_metrics import record_cache_operation
from .entities import CachedValue, CacheStats, CacheStatsRegistry
from .value_objects import CacheConfiguration, CacheNamespaceConfig, TTL

_STAT_COUNTERS = {
    ("get", "hit"): "hits",
    ("get", "miss"): "misses",
    ("put", "stored"): "puts",
    ("put", "null_skipped"): "null_skips",
    ("evict", "removed"): "evictions",
}


class CacheStore(ABC):
    """
    Abstract key/value store keyed by (namespace, key).

    Implementations apply the namespace table for TTL and null policy,
    keep per-namespace statistics, and never let a backend failure escape
    from ``get``/``put``/``evict``/``clear_namespace``.
    """

    def __init__(self, configuration: CacheConfiguration):
        self.configuration = configuration
        self._stats = CacheStatsRegistry()

    @abstractmethod
    async def get(self, namespace: str, key: str) -> Optional[CachedValue]:
        """Return the live entry for the key, or ``None`` on miss or expiry."""

    @abstractmethod
    async def put(
        self, namespace: str, key: str, value: Any, ttl: Optional[TTL] = None
    ) -> bool:
        """Write the value unconditionally; return whether anything was stored."""

    @abstractmethod
    async def evict(self, namespace: str, key: str) -> None:
        """Remove one entry if present."""

    @abstractmethod
    async def clear_namespace(self, namespace: str) -> int:
        """Remove every entry of a namespace and return how many were removed."""

    async def ping(self) -> bool:
        """Report whether the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release backend resources."""

    def policy(self, namespace: str) -> CacheNamespaceConfig:
        return self.configuration.for_namespace(namespace)

    def skips_null(self, namespace: str, value: Any) -> bool:
        """Check if writing ``value`` must be a no-op under the namespace policy."""
        return value is None and not self.policy(namespace).cache_null_values

    def _record(self, namespace: str, operation: str, result: str) -> None:
        """Count one operation outcome in the namespace statistics."""
        stats = self._stats.for_namespace(namespace)
        counter = _STAT_COUNTERS.get((operation, result))
        if counter is None and result == "error":
            counter = "errors"
        if counter is not None:
            setattr(stats, counter, getattr(stats, counter) + 1)
        record_cache_operation(namespace, operation, result)

    def _record_cleared(self, namespace: str, count: int) -> None:
        """Count the entries dropped by a namespace clear as evictions."""
        self._stats.for_namespace(namespace).evictions += count
        record_cache_operation(namespace, "clear", "removed" if count else "empty")

    def stats(self, namespace: Optional[str] = None) -> Dict[str, CacheStats]:
        """Statistics for one namespace, or for every namespace seen so far."""
        if namespace is not None:
            return {namespace: self._stats.for_namespace(namespace)}
        return self._stats.snapshot()
