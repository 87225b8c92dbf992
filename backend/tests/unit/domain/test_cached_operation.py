"""
Unit tests for the cache-aside wrapper.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from hello_directory.constants import HELLO_CACHE
from hello_directory.domain.cache.domain_services import CachedOperation
from hello_directory.domain.cache.entities import CachedValue
from hello_directory.infrastructure.redis.exceptions import RedisConnectionException


class TestCachedOperation:
    """Test CachedOperation.invoke."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, cached_operation, local_store):
        producer = MagicMock(return_value="Hello, John!")

        first = await cached_operation.invoke(HELLO_CACHE, ("John",), producer)
        second = await cached_operation.invoke(HELLO_CACHE, ("John",), producer)

        assert first == second == "Hello, John!"
        producer.assert_called_once()
        assert (HELLO_CACHE, "John") in local_store.entries()

    @pytest.mark.asyncio
    async def test_normalized_arguments_share_entry(self, cached_operation):
        producer = MagicMock(return_value="value")

        await cached_operation.invoke(HELLO_CACHE, ("  John   Doe ",), producer)
        await cached_operation.invoke(HELLO_CACHE, ("John Doe",), producer)

        producer.assert_called_once()

    @pytest.mark.asyncio
    async def test_async_producer_is_awaited(self, cached_operation):
        producer = AsyncMock(return_value=7)

        assert await cached_operation.invoke("numbers", (1,), producer) == 7
        assert await cached_operation.invoke("numbers", (1,), producer) == 7
        producer.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_entry_expires_with_namespace_ttl(self, cached_operation, clock):
        producer = MagicMock(side_effect=["first", "second"])

        assert await cached_operation.invoke(HELLO_CACHE, ("a",), producer) == "first"
        clock.advance(9.9)
        assert await cached_operation.invoke(HELLO_CACHE, ("a",), producer) == "first"
        clock.advance(0.1)
        assert await cached_operation.invoke(HELLO_CACHE, ("a",), producer) == "second"
        assert producer.call_count == 2

    @pytest.mark.asyncio
    async def test_producer_failure_propagates_and_caches_nothing(
        self, cached_operation, local_store
    ):
        producer = MagicMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await cached_operation.invoke(HELLO_CACHE, ("x",), producer)

        assert local_store.entries() == {}

    @pytest.mark.asyncio
    async def test_null_result_not_cached(self, cached_operation, local_store):
        producer = MagicMock(return_value=None)

        assert await cached_operation.invoke("lookups", ("k",), producer) is None
        assert await cached_operation.invoke("lookups", ("k",), producer) is None

        assert producer.call_count == 2
        assert local_store.entries() == {}

    @pytest.mark.asyncio
    async def test_cache_failure_degrades_to_producer(self):
        store = MagicMock()
        store.get = AsyncMock(side_effect=RedisConnectionException("down"))
        store.put = AsyncMock(side_effect=RedisConnectionException("down"))
        operation = CachedOperation(store)

        result = await operation.invoke(HELLO_CACHE, ("John",), lambda: "fresh")

        assert result == "fresh"
        store.put.assert_awaited_once_with(HELLO_CACHE, "John", "fresh")

    @pytest.mark.asyncio
    async def test_cached_none_is_a_hit(self):
        store = MagicMock()
        store.get = AsyncMock(return_value=CachedValue(None))
        store.put = AsyncMock()
        producer = MagicMock()

        result = await CachedOperation(store).invoke("ns", ("k",), producer)

        assert result is None
        producer.assert_not_called()
        store.put.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_misses_may_both_produce(self, cached_operation):
        calls = []

        async def producer():
            calls.append(1)
            await asyncio.sleep(0)
            return "v"

        results = await asyncio.gather(
            cached_operation.invoke("ns", ("k",), producer),
            cached_operation.invoke("ns", ("k",), producer),
        )

        assert results == ["v", "v"]
        assert 1 <= len(calls) <= 2


class TestCachedDecorator:
    """Test the cached() decorator factory."""

    @pytest.mark.asyncio
    async def test_decorated_function(self, cached_operation):
        calls = []

        @cached_operation.cached("squares")
        def square(n):
            calls.append(n)
            return n * n

        assert await square(4) == 16
        assert await square(4) == 16
        assert calls == [4]
        assert square.cache_namespace == "squares"
        assert square.__name__ == "square"

    @pytest.mark.asyncio
    async def test_keyword_arguments_feed_the_key(self, cached_operation):
        calls = []

        @cached_operation.cached("squares")
        def square(n=0):
            calls.append(n)
            return n * n

        assert await square(n=3) == 9
        assert await square(n=5) == 25
        assert await square(3) == 9
        assert calls == [3, 5]

    def test_namespace_with_separator_rejected(self, cached_operation):
        with pytest.raises(ValueError, match="::"):
            cached_operation.cached("a::b")
