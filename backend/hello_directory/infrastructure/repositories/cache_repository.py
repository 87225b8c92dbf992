"""
Cache Repository Implementations

Two ``CacheStore`` backends satisfying the same contract:

- ``RedisCacheStore``: shared, network-backed, JSON-serialized values.
- ``InMemoryCacheStore``: process-local, used for isolated and test runs.
"""

import json
import logging
import re
import time
from typing import Any, Callable, Dict, Optional, Tuple

from opentelemetry import trace
from redis.asyncio import Redis

from ...constants import NAMESPACE_SEPARATOR
from ...domain.cache.entities import CachedValue, CacheEntry
from ...domain.cache.repository_interfaces import CacheStore
from ...domain.cache.value_objects import CacheConfiguration, TTL, validate_namespace
from ...domain.exceptions import BackendUnavailable
from ..redis.circuit_breaker import RedisCircuitBreaker

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")
_ENVELOPE_FIELD = "v"
_SCAN_BATCH = 500


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisCacheStore(CacheStore):
    """
    Redis implementation of the cache store.

    Physical keys are ``{prefix}{namespace}::{key}``. Values are stored as a
    JSON envelope ``{"v": value}`` with a millisecond expiry. Every Redis
    failure is counted and logged, then treated as a miss on reads and as a
    skipped write on writes.
    """

    def __init__(
        self,
        configuration: CacheConfiguration,
        client: Redis,
        circuit_breaker: Optional[RedisCircuitBreaker] = None,
        key_prefix: str = "",
    ):
        super().__init__(configuration)
        self.client = client
        self.circuit_breaker = circuit_breaker or RedisCircuitBreaker()
        self.key_prefix = key_prefix

    def physical_key(self, namespace: str, key: str) -> str:
        validate_namespace(namespace)
        return f"{self.key_prefix}{namespace}{NAMESPACE_SEPARATOR}{key}"

    def namespace_pattern(self, namespace: str) -> str:
        validate_namespace(namespace)
        return f"{escape_glob(self.key_prefix + namespace + NAMESPACE_SEPARATOR)}*"

    async def get(self, namespace: str, key: str) -> Optional[CachedValue]:
        """Get a value from Redis; failures and undecodable payloads are misses."""
        redis_key = self.physical_key(namespace, key)

        with tracer.start_as_current_span("cache.redis.get") as span:
            span.set_attribute("cache.namespace", namespace)
            try:
                raw = await self.circuit_breaker.call("get", self.client.get, redis_key)
            except BackendUnavailable as e:
                self._absorb("get", namespace, key, e)
                return None

            if raw is None:
                span.set_attribute("cache.hit", False)
                self._record(namespace, "get", "miss")
                return None

            try:
                envelope = json.loads(raw)
                value = envelope[_ENVELOPE_FIELD]
            except (ValueError, TypeError, KeyError) as e:
                logger.warning(
                    f"Discarding undecodable cache payload for {redis_key}: {e}",
                    extra={"namespace": namespace, "key": key},
                )
                self._record(namespace, "get", "miss")
                return None

            span.set_attribute("cache.hit", True)
            self._record(namespace, "get", "hit")
            return CachedValue(value)

    async def put(
        self, namespace: str, key: str, value: Any, ttl: Optional[TTL] = None
    ) -> bool:
        """Store a value with the resolved TTL; best effort."""
        if self.skips_null(namespace, value):
            self._record(namespace, "put", "null_skipped")
            return False

        redis_key = self.physical_key(namespace, key)
        entry_ttl = self.configuration.resolve_ttl(namespace, ttl)

        try:
            payload = json.dumps({_ENVELOPE_FIELD: value})
        except (TypeError, ValueError) as e:
            logger.warning(
                f"Value for {redis_key} is not JSON serializable, not cached: {e}",
                extra={"namespace": namespace, "key": key},
            )
            self._record(namespace, "put", "unserializable")
            return False

        with tracer.start_as_current_span("cache.redis.put") as span:
            span.set_attribute("cache.namespace", namespace)
            span.set_attribute("cache.ttl_ms", entry_ttl.milliseconds)
            try:
                await self.circuit_breaker.call(
                    "set", self.client.set, redis_key, payload, px=entry_ttl.milliseconds
                )
            except BackendUnavailable as e:
                self._absorb("set", namespace, key, e)
                return False

        self._record(namespace, "put", "stored")
        logger.debug(
            f"Cached {redis_key}",
            extra={"namespace": namespace, "ttl_seconds": entry_ttl.seconds},
        )
        return True

    async def evict(self, namespace: str, key: str) -> None:
        """Delete one entry; absent keys are a no-op."""
        try:
            removed = await self.circuit_breaker.call(
                "delete", self.client.delete, self.physical_key(namespace, key)
            )
        except BackendUnavailable as e:
            self._absorb("delete", namespace, key, e)
            return
        self._record(namespace, "evict", "removed" if removed else "absent")

    async def clear_namespace(self, namespace: str) -> int:
        """Remove all keys of a namespace using cursor-based SCAN and UNLINK."""
        pattern = self.namespace_pattern(namespace)
        removed = 0
        cursor = 0

        try:
            while True:
                cursor, keys = await self.circuit_breaker.call(
                    "scan", self.client.scan, cursor, match=pattern, count=_SCAN_BATCH
                )
                if keys:
                    removed += await self.circuit_breaker.call(
                        "unlink", self.client.unlink, *keys
                    )
                if cursor == 0:
                    break
        except BackendUnavailable as e:
            self._absorb("clear", namespace, pattern, e)

        self._record_cleared(namespace, removed)
        logger.info(
            f"Cleared {removed} cache entries in namespace {namespace}",
            extra={"namespace": namespace, "count": removed},
        )
        return removed

    async def ping(self) -> bool:
        try:
            return bool(await self.circuit_breaker.call("ping", self.client.ping))
        except BackendUnavailable:
            return False

    def _absorb(
        self, operation: str, namespace: str, key: str, error: BackendUnavailable
    ) -> None:
        operation_name = {"set": "put", "delete": "evict"}.get(operation, operation)
        self._record(namespace, operation_name, "error")
        logger.warning(
            f"Redis {operation} failed, continuing without cache: {error.message}",
            extra={
                "namespace": namespace,
                "key": key,
                "error_code": error.error_code,
            },
        )


class InMemoryCacheStore(CacheStore):
    """
    Process-local cache store.

    Entries live in a dict keyed by ``(namespace, key)`` and expire against
    an injectable clock. Values are kept by reference, not serialized.
    Not shared across processes.
    """

    def __init__(
        self,
        configuration: CacheConfiguration,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(configuration)
        self._clock = clock
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}

    async def get(self, namespace: str, key: str) -> Optional[CachedValue]:
        entry = self._entries.get((namespace, key))
        if entry is not None and entry.is_expired(self._clock()):
            del self._entries[(namespace, key)]
            entry = None

        if entry is None:
            self._record(namespace, "get", "miss")
            return None

        self._record(namespace, "get", "hit")
        return CachedValue(entry.value)

    async def put(
        self, namespace: str, key: str, value: Any, ttl: Optional[TTL] = None
    ) -> bool:
        if self.skips_null(namespace, value):
            self._record(namespace, "put", "null_skipped")
            return False

        self._entries[(namespace, key)] = CacheEntry.create(
            namespace,
            key,
            value,
            self.configuration.resolve_ttl(namespace, ttl),
            now=self._clock(),
        )
        self._record(namespace, "put", "stored")
        return True

    async def evict(self, namespace: str, key: str) -> None:
        removed = self._entries.pop((namespace, key), None)
        self._record(namespace, "evict", "removed" if removed else "absent")

    async def clear_namespace(self, namespace: str) -> int:
        doomed = [k for k in self._entries if k[0] == namespace]
        for k in doomed:
            del self._entries[k]
        self._record_cleared(namespace, len(doomed))
        return len(doomed)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def entries(self) -> Dict[Tuple[str, str], CacheEntry]:
        """Snapshot of the physically stored entries, expired ones included."""
        return dict(self._entries)
