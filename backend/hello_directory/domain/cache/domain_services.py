"""
Cache Domain Services

Cache-aside composition: look the key up, compute on miss, write through.
"""

import inspect
from functools import wraps
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

import structlog
from opentelemetry import trace

from ..exceptions import BackendUnavailable
from .key_generator import KeyGenerator, SanitisedKeyGenerator
from .repository_interfaces import CacheStore
from .value_objects import validate_namespace

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

T = TypeVar("T")
Producer = Callable[[], Union[T, Awaitable[T]]]


class CachedOperation:
    """
    Generic compute-or-fetch wrapper around a ``CacheStore``.

    The producer runs exactly once per call on a miss and never on a hit.
    Producer failures propagate unchanged and nothing is cached for them.
    Concurrent misses on the same key may each run the producer; the last
    write wins.
    """

    def __init__(self, store: CacheStore, key_generator: Optional[KeyGenerator] = None):
        self.store = store
        self.key_generator = key_generator or SanitisedKeyGenerator()

    async def invoke(
        self,
        namespace: str,
        args: Sequence[Any],
        producer: Producer,
        key_generator: Optional[KeyGenerator] = None,
    ) -> Any:
        """
        Return the cached value for ``args`` or compute, store and return it.

        Args:
            namespace: Cache namespace holding the entry
            args: Call arguments the key is derived from
            producer: Zero-argument callable (sync or async) computing the value
            key_generator: Overrides the wrapper's key generator for this call

        Returns:
            The cached or freshly produced value
        """
        key = (key_generator or self.key_generator).generate(*args)

        with tracer.start_as_current_span("cache.invoke") as span:
            span.set_attribute("cache.namespace", namespace)
            span.set_attribute("cache.key", key)

            cached = await self._lookup(namespace, key)
            if cached is not None:
                span.set_attribute("cache.hit", True)
                return cached.value

            span.set_attribute("cache.hit", False)
            result = producer()
            if inspect.isawaitable(result):
                result = await result

            await self._write(namespace, key, result)
            return result

    def cached(
        self, namespace: str, key_generator: Optional[KeyGenerator] = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Awaitable[Any]]]:
        """
        Decorator factory binding a function to a namespace.

        The wrapped function becomes a coroutine function. The key is taken
        from the arguments the caller actually passed, bound to the
        function's signature, so ``f("a")`` and ``f(name="a")`` share an
        entry. Omitted defaults do not contribute to the key.
        """
        validate_namespace(namespace)

        def decorator(func: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
            signature = inspect.signature(func)

            @wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> Any:
                bound = signature.bind(*args, **kwargs)
                return await self.invoke(
                    namespace,
                    bound.args + tuple(bound.kwargs.values()),
                    lambda: func(*args, **kwargs),
                    key_generator=key_generator,
                )

            wrapper.cache_namespace = namespace  # type: ignore[attr-defined]
            return wrapper

        return decorator

    async def _lookup(self, namespace: str, key: str):
        try:
            return await self.store.get(namespace, key)
        except BackendUnavailable as e:
            logger.warning(
                "Cache lookup failed, treating as miss",
                namespace=namespace,
                key=key,
                error=e.message,
            )
            return None

    async def _write(self, namespace: str, key: str, value: Any) -> None:
        try:
            await self.store.put(namespace, key, value)
        except BackendUnavailable as e:
            logger.warning(
                "Cache write failed, result not cached",
                namespace=namespace,
                key=key,
                error=e.message,
            )
