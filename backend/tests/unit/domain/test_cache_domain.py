"""
Unit tests for Cache Domain Models.

Tests key generation, value objects, namespace policy and entry expiry.
"""

import pytest

from hello_directory.constants import DEFAULT_CACHE_KEY, HELLO_CACHE
from hello_directory.domain.cache.entities import CacheEntry, CacheStats
from hello_directory.domain.cache.key_generator import (
    SanitisedKeyGenerator,
    normalize_space,
)
from hello_directory.domain.cache.value_objects import (
    TTL,
    CacheConfiguration,
    CacheNamespaceConfig,
)


class TestSanitisedKeyGenerator:
    """Test SanitisedKeyGenerator."""

    @pytest.fixture
    def generator(self):
        return SanitisedKeyGenerator()

    def test_no_arguments_use_default_key(self, generator):
        assert generator.generate() == DEFAULT_CACHE_KEY
        assert SanitisedKeyGenerator().generate() == generator.generate()

    def test_whitespace_collapses(self, generator):
        assert generator.generate("  John   Doe  ") == "John Doe"
        assert generator.generate("John\t\n Doe") == "John Doe"

    @pytest.mark.parametrize("text", ["plain", "  a  b  c ", "\ttabs\tand\nnewlines\n", ""])
    def test_normalization_is_idempotent(self, generator, text):
        assert generator.generate(text) == generator.generate(normalize_space(text))

    def test_none_argument_becomes_null_text(self, generator):
        assert generator.generate(None) == "null"

    def test_only_first_argument_counts(self, generator):
        assert generator.generate("John", "ignored") == "John"

    def test_non_string_argument_uses_str(self, generator):
        assert generator.generate(42) == "42"

    def test_custom_default_key(self):
        assert SanitisedKeyGenerator(default_key="none").generate() == "none"


class TestTTL:
    """Test TTL value object."""

    def test_ttl_creation(self):
        assert TTL(10).seconds == 10
        assert TTL.of_seconds(5).seconds == 5
        assert TTL.minutes(10).seconds == 600

    def test_milliseconds(self):
        assert TTL(10).milliseconds == 10000
        assert TTL(0.0001).milliseconds == 1

    def test_invalid_ttl(self):
        with pytest.raises(ValueError, match="TTL must be positive"):
            TTL(0)
        with pytest.raises(ValueError, match="TTL too large"):
            TTL(86400 * 366)

    def test_str(self):
        assert str(TTL(10)) == "10s"


class TestCacheConfiguration:
    """Test namespace policy resolution."""

    @pytest.fixture
    def configuration(self):
        return CacheConfiguration.build(600, ttl_overrides={HELLO_CACHE: 10})

    def test_override_applies_to_namespace(self, configuration):
        assert configuration.for_namespace(HELLO_CACHE).ttl == TTL(10)

    def test_unknown_namespace_falls_back_to_default(self, configuration):
        policy = configuration.for_namespace("other")
        assert policy.name == "other"
        assert policy.ttl == TTL(600)
        assert policy.cache_null_values is False

    def test_explicit_ttl_wins(self, configuration):
        assert configuration.resolve_ttl(HELLO_CACHE, TTL(3)) == TTL(3)
        assert configuration.resolve_ttl(HELLO_CACHE) == TTL(10)
        assert configuration.resolve_ttl("other") == TTL(600)

    def test_null_policy_inherited_by_overrides(self):
        configuration = CacheConfiguration.build(
            600, cache_null_values=True, ttl_overrides={HELLO_CACHE: 10}
        )
        assert configuration.for_namespace(HELLO_CACHE).cache_null_values is True

    def test_empty_namespace_rejected(self):
        with pytest.raises(ValueError, match="Cache namespace cannot be empty"):
            CacheNamespaceConfig(name="", ttl=TTL(1))

    def test_separator_in_namespace_rejected(self):
        with pytest.raises(ValueError, match="must not contain"):
            CacheNamespaceConfig(name="users::v2", ttl=TTL(1))

    def test_override_with_separator_rejected(self):
        with pytest.raises(ValueError, match="must not contain"):
            CacheConfiguration.build(600, ttl_overrides={"a::b": 10})


class TestCacheEntry:
    """Test CacheEntry entity."""

    def test_expiry_boundary(self):
        entry = CacheEntry.create("ns", "k", "v", TTL(10), now=100.0)
        assert entry.expires_at == 110.0
        assert not entry.is_expired(109.999)
        assert entry.is_expired(110.0)


class TestCacheStats:
    """Test CacheStats counters."""

    def test_hit_ratio(self):
        stats = CacheStats(namespace="ns", hits=3, misses=1)
        assert stats.requests == 4
        assert stats.hit_ratio == 0.75
        assert stats.to_dict()["hit_ratio"] == 0.75

    def test_hit_ratio_without_requests(self):
        assert CacheStats(namespace="ns").hit_ratio == 0.0
