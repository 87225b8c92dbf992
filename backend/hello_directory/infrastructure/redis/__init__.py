"""
Redis Infrastructure Module

Connection management, circuit breaker and exceptions for the distributed
cache backend.
"""

from .circuit_breaker import (
    CircuitBreakerConfig,
    CircuitBreakerMetrics,
    CircuitState,
    RedisCircuitBreaker,
)
from .connection_factory import RedisConnectionFactory
from .exceptions import (
    RedisCircuitBreakerOpenException,
    RedisCommandException,
    RedisConfigurationException,
    RedisConnectionException,
    RedisException,
    RedisOperationTimeoutException,
)

__all__ = [
    # Connection management
    "RedisConnectionFactory",
    # Circuit breaker
    "RedisCircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitState",
    "CircuitBreakerMetrics",
    # Exceptions
    "RedisException",
    "RedisConnectionException",
    "RedisOperationTimeoutException",
    "RedisCircuitBreakerOpenException",
    "RedisCommandException",
    "RedisConfigurationException",
]
