"""
Cache Domain Entities

Core domain entities for cache management.
Encapsulates expiry rules and per-namespace statistics.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from .value_objects import TTL


@dataclass(frozen=True)
class CachedValue:
    """
    Wrapper returned by a cache hit.

    Lets a cached ``None`` be told apart from a miss when a namespace
    stores null values.
    """

    value: Any


@dataclass(frozen=True)
class CacheEntry:
    """
    Cache entry entity.

    Never mutated in place; a re-write replaces the whole entry.
    ``expires_at`` is expressed on the owning store's clock.
    """

    namespace: str
    key: str
    value: Any
    expires_at: float

    @classmethod
    def create(
        cls, namespace: str, key: str, value: Any, ttl: TTL, now: float
    ) -> "CacheEntry":
        """Create new cache entry expiring ``ttl`` after ``now``."""
        return cls(
            namespace=namespace,
            key=key,
            value=value,
            expires_at=now + ttl.seconds,
        )

    def is_expired(self, now: float) -> bool:
        """Check if cache entry is expired at ``now``."""
        return now >= self.expires_at


@dataclass
class CacheStats:
    """Operation counters for one cache namespace."""

    namespace: str
    hits: int = 0
    misses: int = 0
    puts: int = 0
    null_skips: int = 0
    evictions: int = 0
    errors: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        """Calculate hit ratio."""
        if self.requests == 0:
            return 0.0
        return self.hits / self.requests

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "hits": self.hits,
            "misses": self.misses,
            "puts": self.puts,
            "null_skips": self.null_skips,
            "evictions": self.evictions,
            "errors": self.errors,
            "hit_ratio": round(self.hit_ratio, 4),
        }


@dataclass
class CacheStatsRegistry:
    """Lazily created ``CacheStats`` per namespace."""

    _stats: Dict[str, CacheStats] = field(default_factory=dict)

    def for_namespace(self, namespace: str) -> CacheStats:
        stats = self._stats.get(namespace)
        if stats is None:
            stats = self._stats[namespace] = CacheStats(namespace=namespace)
        return stats

    def snapshot(self) -> Dict[str, CacheStats]:
        return dict(self._stats)
