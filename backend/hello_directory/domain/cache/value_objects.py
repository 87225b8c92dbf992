"""
Cache Value Objects

Immutable value objects for the cache domain.
Provides type safety and validation for TTLs and namespace policy.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Mapping, Optional

from ...constants import NAMESPACE_SEPARATOR


@dataclass(frozen=True)
class TTL:
    """
    Time To Live value object for cache expiration.

    Provides type-safe TTL configuration with validation.
    """

    seconds: float

    def __post_init__(self) -> None:
        """Validate TTL value."""
        if self.seconds <= 0:
            raise ValueError("TTL must be positive")
        if self.seconds > 86400 * 365:  # Max 1 year
            raise ValueError("TTL too large (max 1 year)")

    @classmethod
    def of_seconds(cls, seconds: float) -> "TTL":
        """Create TTL from seconds."""
        return cls(seconds)

    @classmethod
    def minutes(cls, minutes: float) -> "TTL":
        """Create TTL from minutes."""
        return cls(minutes * 60)

    @property
    def milliseconds(self) -> int:
        """TTL in whole milliseconds, never below one."""
        return max(1, int(round(self.seconds * 1000)))

    def __str__(self) -> str:
        return f"{self.seconds:g}s"


def validate_namespace(name: str) -> str:
    """Reject names that would make physical cache keys ambiguous."""
    if not name:
        raise ValueError("Cache namespace cannot be empty")
    if NAMESPACE_SEPARATOR in name:
        raise ValueError(
            f"Cache namespace {name!r} must not contain {NAMESPACE_SEPARATOR!r}"
        )
    return name


@dataclass(frozen=True)
class CacheNamespaceConfig:
    """Per-namespace cache policy: TTL and whether null values are stored."""

    name: str
    ttl: TTL
    cache_null_values: bool = False

    def __post_init__(self) -> None:
        validate_namespace(self.name)


@dataclass(frozen=True)
class CacheConfiguration:
    """
    Process-wide namespace table.

    Holds one default entry applied to any namespace without an override.
    Built once at start-up and never mutated.
    """

    default: CacheNamespaceConfig
    namespaces: Mapping[str, CacheNamespaceConfig] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        default_ttl_seconds: float,
        cache_null_values: bool = False,
        ttl_overrides: Optional[Dict[str, float]] = None,
    ) -> "CacheConfiguration":
        """Create the table from a default TTL and per-namespace TTL overrides."""
        default = CacheNamespaceConfig(
            name="default",
            ttl=TTL(default_ttl_seconds),
            cache_null_values=cache_null_values,
        )
        namespaces = {
            name: replace(default, name=name, ttl=TTL(seconds))
            for name, seconds in (ttl_overrides or {}).items()
        }
        return cls(default=default, namespaces=namespaces)

    def for_namespace(self, namespace: str) -> CacheNamespaceConfig:
        """Resolve the policy for a namespace, falling back to the default entry."""
        config = self.namespaces.get(namespace)
        if config is not None:
            return config
        return replace(self.default, name=namespace)

    def resolve_ttl(self, namespace: str, ttl_override: Optional[TTL] = None) -> TTL:
        """Pick the explicit TTL, else the namespace TTL, else the default TTL."""
        if ttl_override is not None:
            return ttl_override
        return self.for_namespace(namespace).ttl
