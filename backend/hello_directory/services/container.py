"""
Service Container

Builds the process-wide collaborators once at start-up and tears them
down at shutdown. Route handlers reach them through ``app.state``.
"""

from typing import Any, Dict, Optional

import structlog

from ..core.config import Settings
from ..core.database import DatabaseManager
from ..domain.cache.domain_services import CachedOperation
from ..domain.cache.key_generator import KeyGenerator, SanitisedKeyGenerator
from ..domain.cache.repository_interfaces import CacheStore
from ..domain.cache.value_objects import CacheConfiguration
from ..domain.users.domain_services import UserDirectory
from ..domain.users.repository_interfaces import UserStorage
from ..infrastructure.redis.circuit_breaker import (
    CircuitBreakerConfig,
    RedisCircuitBreaker,
)
from ..infrastructure.redis.connection_factory import RedisConnectionFactory
from ..infrastructure.repositories.cache_repository import (
    InMemoryCacheStore,
    RedisCacheStore,
)
from ..infrastructure.repositories.user_repository import SqlAlchemyUserStorage
from .hello_service import HelloService

logger = structlog.get_logger()


def build_cache_configuration(settings: Settings) -> CacheConfiguration:
    return CacheConfiguration.build(
        settings.CACHE_DEFAULT_TTL_SECONDS,
        cache_null_values=settings.CACHE_NULL_VALUES,
        ttl_overrides=settings.cache_ttl_overrides,
    )


class ServiceContainer:
    """
    Holder of the wired services.

    ``from_settings`` creates unstarted backends; ``startup`` opens them.
    A container assembled directly from ready objects (as tests do) needs
    no startup and owns nothing to close.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        user_storage: UserStorage,
        key_generator: Optional[KeyGenerator] = None,
        database: Optional[DatabaseManager] = None,
        redis_factory: Optional[RedisConnectionFactory] = None,
    ):
        self.cache_store = cache_store
        self.user_storage = user_storage
        self.key_generator = key_generator or SanitisedKeyGenerator()
        self.database = database
        self.redis_factory = redis_factory

        self.cached_operation = CachedOperation(cache_store, self.key_generator)
        self.hello_service = HelloService(self.cached_operation)
        self.user_directory = UserDirectory(user_storage)

    @classmethod
    async def from_settings(cls, settings: Settings) -> "ServiceContainer":
        """Create and start every backend named by ``settings``."""
        configuration = build_cache_configuration(settings)

        database = DatabaseManager(settings)
        await database.initialize()

        redis_factory = None
        try:
            if settings.CACHE_BACKEND == "redis":
                redis_factory = RedisConnectionFactory(settings)
                client = await redis_factory.initialize()
                cache_store: CacheStore = RedisCacheStore(
                    configuration,
                    client,
                    circuit_breaker=RedisCircuitBreaker(
                        CircuitBreakerConfig(
                            failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
                            recovery_timeout=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT,
                            operation_timeout=settings.REDIS_OPERATION_TIMEOUT,
                        )
                    ),
                    key_prefix=settings.REDIS_KEY_PREFIX,
                )
            else:
                cache_store = InMemoryCacheStore(configuration)
        except Exception as e:
            logger.error("Cache backend failed to start", error=str(e))
            if redis_factory is not None:
                await redis_factory.close()
            await database.close()
            raise

        logger.info(
            "Service container ready",
            cache_backend=settings.CACHE_BACKEND,
            database_dialect=database.engine.dialect.name,
        )
        return cls(
            cache_store=cache_store,
            user_storage=SqlAlchemyUserStorage(database.session),
            database=database,
            redis_factory=redis_factory,
        )

    async def readiness(self) -> Dict[str, Any]:
        """Report database and cache reachability and the Redis breaker state."""
        if self.database is not None:
            database = await self.database.health_check()
        else:
            database = {"status": "healthy", "backend": type(self.user_storage).__name__}

        cache_up = await self.cache_store.ping()
        cache = {
            "status": "healthy" if cache_up else "degraded",
            "backend": type(self.cache_store).__name__,
        }
        circuit_breaker = getattr(self.cache_store, "circuit_breaker", None)
        if circuit_breaker is not None:
            cache["circuit_breaker"] = circuit_breaker.get_status()

        if database["status"] != "healthy":
            status = "unhealthy"
        elif not cache_up:
            status = "degraded"
        else:
            status = "healthy"
        return {"status": status, "database": database, "cache": cache}

    async def shutdown(self) -> None:
        """Close the Redis pool and dispose the engine."""
        try:
            await self.cache_store.close()
            if self.redis_factory is not None:
                await self.redis_factory.close()
        finally:
            if self.database is not None:
                await self.database.close()
        logger.info("Service container closed")
