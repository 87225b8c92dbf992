"""
Redis Connection Factory

Owns the process-wide Redis connection pool with bounded connect and
read timeouts. Constructed once at start-up and passed to the cache store.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from redis.asyncio import ConnectionPool, Redis

from ...core.config import Settings
from .exceptions import RedisConfigurationException

logger = logging.getLogger(__name__)


class RedisConnectionFactory:
    """
    Factory for the shared Redis client.

    The pool connects lazily, so an unreachable Redis at start-up only
    produces a warning; cache calls then degrade to misses.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[Redis] = None

    def _connection_kwargs(self) -> Dict[str, Any]:
        parsed_url = urlparse(self.settings.REDIS_URL)
        if parsed_url.scheme not in ("redis", "rediss"):
            raise RedisConfigurationException(
                f"Unsupported Redis URL scheme: {parsed_url.scheme!r}",
                config_key="REDIS_URL",
            )
        return {
            "socket_connect_timeout": self.settings.REDIS_CONNECTION_TIMEOUT,
            "socket_timeout": self.settings.REDIS_OPERATION_TIMEOUT,
            "max_connections": self.settings.REDIS_MAX_CONNECTIONS,
            "decode_responses": True,
            "encoding": "utf-8",
        }

    async def initialize(self) -> Redis:
        """Create the pool and client, pinging the server once."""
        if self._client is not None:
            return self._client

        connection_kwargs = self._connection_kwargs()
        self._pool = ConnectionPool.from_url(self.settings.REDIS_URL, **connection_kwargs)
        self._client = Redis(connection_pool=self._pool)

        parsed_url = urlparse(self.settings.REDIS_URL)
        try:
            await self._client.ping()
            logger.info(
                "Redis connection factory initialized",
                extra={
                    "host": parsed_url.hostname,
                    "port": parsed_url.port,
                    "max_connections": connection_kwargs["max_connections"],
                },
            )
        except Exception as e:
            logger.warning(
                f"Redis not reachable at start-up, cache will degrade to misses: {e}",
                extra={"host": parsed_url.hostname, "port": parsed_url.port},
            )

        return self._client

    async def close(self) -> None:
        """Close the client and disconnect the pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None
        logger.info("Redis connection factory closed")
